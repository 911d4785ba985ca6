from shanghai.logic.enums import WinShape
from shanghai.logic.rules import DEFAULT_RULE_ID, ShanghaiRule, get_rule, is_registered_rule
from shanghai.tests.conftest import ts


class TestRuleRegistry:
    def test_default_rule(self):
        assert DEFAULT_RULE_ID == "shanghai"
        assert isinstance(get_rule("shanghai"), ShanghaiRule)

    def test_lookup_is_normalized(self):
        assert get_rule("  Shanghai ").rule_id == "shanghai"
        assert is_registered_rule("SHANGHAI")

    def test_unknown_falls_back_to_default(self):
        assert get_rule("riichi").rule_id == DEFAULT_RULE_ID
        assert get_rule(None).rule_id == DEFAULT_RULE_ID
        assert not is_registered_rule("riichi")
        assert not is_registered_rule(None)

    def test_rule_delegates_to_recognizer(self):
        result = get_rule("shanghai").check_win(ts("m1 m1 m1 m2 m2 m2 m3 m3 m3 m4 m4 m4 m5 m5"))
        assert result.shape == WinShape.FLUSH_ALL_TRIPLETS
