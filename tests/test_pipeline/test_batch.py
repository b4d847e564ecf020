import pytest

from marathon_pronouns.config.settings import settings
from marathon_pronouns.models.enums import Category
from marathon_pronouns.pipeline.batch import aggregate_marathons, combine_results

OENGUS = settings.oengus_api_url


def result(name, submissions, schedule=None):
    return {
        "name": name,
        "submissions": {"counts": submissions},
        "schedule": {"counts": schedule} if schedule is not None else None,
    }


class TestCombineResults:
    def test_sums_counts_and_recomputes_shares(self):
        combined = combine_results(
            [
                result("one", {"he/him": 2, "she/her": 1, "none": 1, "other": 0, "error": 0}),
                result(
                    "two",
                    {"he/him": 0, "she/her": 1, "none": 0, "other": 1, "error": 2},
                    {"he/him": 1, "notFound": 4},
                ),
            ]
        )

        assert combined.events == ["one", "two"]
        assert combined.submissions.counts[Category.HE_HIM] == 2
        assert combined.submissions.counts[Category.SHE_HER] == 2
        assert combined.submissions.counts[Category.ERROR] == 2
        assert combined.submissions.percentages[Category.HE_HIM] == pytest.approx(0.25)
        assert combined.submissions.normalized_percentages[Category.HE_HIM] == pytest.approx(0.4)
        # notFound is not carried into the combined schedule
        assert combined.schedule.counts == {
            Category.NONE: 0,
            Category.HE_HIM: 1,
            Category.SHE_HER: 0,
            Category.OTHER: 0,
            Category.ERROR: 0,
        }

    def test_no_results(self):
        combined = combine_results([])
        assert combined.events == []
        assert all(value is None for value in combined.submissions.percentages.values())


class TestAggregateMarathons:
    @pytest.mark.asyncio
    async def test_filters_language_and_skips_failures(self, fake_api, cache):
        fake_api.add(
            f"{OENGUS}/marathons/forDates",
            json=[
                {"id": "good", "language": "en"},
                {"id": "broken", "language": "en"},
                {"id": "french", "language": "fr"},
            ],
        )
        fake_api.add(f"{OENGUS}/marathons/good", json={"name": "Good Marathon"})
        fake_api.add(
            f"{OENGUS}/marathons/good/submissions",
            json=[{"user": {"username": "x", "pronouns": "she/her", "connections": []}}],
        )
        fake_api.add(f"{OENGUS}/marathons/good/schedule", json={"lines": None})

        combined = await aggregate_marathons(
            "2021-01-01T05:00:00.000Z",
            "2022-05-08T05:00:00.000Z",
            "America/Chicago",
            language="en",
            client=fake_api.client(),
            cache=cache,
            max_concurrency=2,
            max_attempts=1,
        )

        assert combined.events == ["Good Marathon"]
        assert combined.submissions.counts[Category.SHE_HER] == 1
        assert fake_api.count(f"{OENGUS}/marathons/french") == 0
