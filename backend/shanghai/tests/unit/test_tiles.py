"""
Unit tests for the tile model and index mapping.
"""

import pytest
from pydantic import ValidationError

from shanghai.logic.enums import Suit
from shanghai.logic.tiles import (
    BONUS_START,
    HONOR_START,
    NUM_TILE_TYPES,
    STANDARD_TILE_COUNT,
    Tile,
    build_tile_set,
    count_tile,
    hand_to_counts,
    index_to_tile,
    is_bonus,
    is_honor,
    is_numbered,
    sort_tiles,
    tile_from_code,
)
from shanghai.tests.conftest import ts


class TestTileModel:
    def test_equal_tiles_compare_and_hash_equal(self):
        a = Tile(suit=Suit.DOTS, rank=5)
        b = Tile(suit=Suit.DOTS, rank=5)
        assert a == b
        assert len({a, b}) == 1

    def test_str_is_compact_code(self):
        assert str(Tile(suit=Suit.BAMBOO, rank=9)) == "s9"
        assert str(Tile(suit=Suit.HONOR, rank=7)) == "z7"

    @pytest.mark.parametrize(
        ("suit", "rank"),
        [(Suit.CHARACTERS, 0), (Suit.CHARACTERS, 10), (Suit.HONOR, 8), (Suit.BONUS, 9)],
    )
    def test_rank_out_of_range_rejected(self, suit, rank):
        with pytest.raises(ValidationError):
            Tile(suit=suit, rank=rank)

    def test_tile_is_frozen(self):
        tile = Tile(suit=Suit.CHARACTERS, rank=1)
        with pytest.raises(ValidationError):
            tile.rank = 2


class TestIndexMapping:
    def test_suit_boundaries(self):
        assert tile_from_code("m1").index == 0
        assert tile_from_code("m9").index == 8
        assert tile_from_code("p1").index == 9
        assert tile_from_code("s9").index == 26
        assert tile_from_code("z1").index == HONOR_START
        assert tile_from_code("z7").index == NUM_TILE_TYPES - 1
        assert tile_from_code("f1").index == BONUS_START

    def test_index_to_tile_inverts_index(self):
        for index in range(BONUS_START + 8):
            assert index_to_tile(index).index == index

    def test_index_out_of_range(self):
        with pytest.raises(ValueError, match="tile index"):
            index_to_tile(42)


class TestTileCodes:
    def test_parse_valid_codes(self):
        assert tile_from_code("p3") == Tile(suit=Suit.DOTS, rank=3)
        assert tile_from_code("f8") == Tile(suit=Suit.BONUS, rank=8)

    @pytest.mark.parametrize("code", ["", "m", "x1", "mm", "1m"])
    def test_invalid_codes(self, code):
        with pytest.raises(ValueError, match="invalid tile"):
            tile_from_code(code)


class TestClassification:
    def test_predicates(self):
        assert is_numbered(tile_from_code("s5"))
        assert is_honor(tile_from_code("z3"))
        assert is_bonus(tile_from_code("f1"))
        assert not is_numbered(tile_from_code("z3"))
        assert not is_honor(tile_from_code("f1"))


class TestHandHelpers:
    def test_sort_by_index(self):
        assert sort_tiles(ts("z1 s2 m9 p1 m1")) == ts("m1 m9 p1 s2 z1")

    def test_count_tile(self):
        assert count_tile(ts("m1 m1 m2 m1"), tile_from_code("m1")) == 3

    def test_counts_skip_bonus(self):
        counts = hand_to_counts(ts("m1 m1 z7 f3"))
        assert len(counts) == NUM_TILE_TYPES
        assert counts[0] == 2
        assert counts[NUM_TILE_TYPES - 1] == 1
        assert sum(counts) == 3


class TestBuildTileSet:
    def test_full_supply(self):
        tiles = build_tile_set(8)
        assert len(tiles) == STANDARD_TILE_COUNT + 8
        assert count_tile(tiles, tile_from_code("m5")) == 4
        assert sum(1 for tile in tiles if is_bonus(tile)) == 8

    def test_no_bonus(self):
        assert len(build_tile_set(0)) == STANDARD_TILE_COUNT

    def test_rejects_too_many_bonus(self):
        with pytest.raises(ValueError, match="num_bonus_tiles"):
            build_tile_set(9)
