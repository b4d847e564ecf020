import pytest

from marathon_pronouns.classification.classifier import (
    category_for,
    classify,
    classify_runner,
    normalize_pronoun,
)
from marathon_pronouns.models.enums import Category
from marathon_pronouns.models.runner import ResolvedRunner


def resolved(pronoun):
    return ResolvedRunner(identifier="runner", resolved_pronoun=pronoun)


class TestNormalizePronoun:
    def test_collapses_slash_spacing(self):
        assert normalize_pronoun("  He / Him ") == "he/him"

    def test_keeps_other_text(self):
        assert normalize_pronoun("They/Them") == "they/them"


class TestClassify:
    @pytest.mark.parametrize("pronoun", ["He/Him", "he / him", "he", "him", "HIM"])
    def test_he_him_forms(self, pronoun):
        assert classify(resolved(pronoun)) == Category.HE_HIM

    @pytest.mark.parametrize("pronoun", ["she/her", "She / Her", "she", "her"])
    def test_she_her_forms(self, pronoun):
        assert classify(resolved(pronoun)) == Category.SHE_HER

    def test_failed_lookup_is_error(self):
        runner = ResolvedRunner(identifier="runner", lookup_failed=True)
        assert classify(runner) == Category.ERROR

    @pytest.mark.parametrize("pronoun", ["error", "Error", "ERROR"])
    def test_error_as_pronoun_text_is_other(self, pronoun):
        assert classify(resolved(pronoun)) == Category.OTHER

    @pytest.mark.parametrize("pronoun", [None, "", "   "])
    def test_absent_is_none(self, pronoun):
        assert classify(resolved(pronoun)) == Category.NONE

    @pytest.mark.parametrize("pronoun", ["they/them", "he/they", "she/they", "any", "other"])
    def test_everything_else_is_other(self, pronoun):
        assert classify(resolved(pronoun)) == Category.OTHER

    def test_category_for_matches_classify(self):
        assert category_for("she/her") == classify(resolved("she/her"))

    def test_classify_runner_keeps_identifier(self):
        entry = classify_runner(ResolvedRunner(identifier="abc", resolved_pronoun="he"))
        assert entry.identifier == "abc"
        assert entry.category == Category.HE_HIM
