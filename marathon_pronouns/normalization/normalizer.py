from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from marathon_pronouns.models.enums import Platform, Source
from marathon_pronouns.models.event import NormalizedEvent
from marathon_pronouns.models.runner import Runner

# Accepted labels (lowercased) for the schedule column that lists runners
VALID_RUNNER_COLUMNS = frozenset(
    {"runner", "runners", "runner(s)", "player", "players", "player(s)"}
)

# Oengus connection platform names mapped onto lookup platforms
OENGUS_CONNECTION_PLATFORMS = {
    "SPEEDRUNCOM": Platform.SPEEDRUNCOM,
    "TWITCH": Platform.TWITCH,
}


class NormalizationError(Exception):
    """Custom exception for data normalization errors."""

    pass


class EventNotFoundError(NormalizationError):
    """The source reports that the requested event does not exist."""

    pass


class MalformedSourceError(NormalizationError):
    """A canonical event could not be derived from the source payload."""

    pass


def _dedupe_runners(runners: List[Runner]) -> List[Runner]:
    """Keeps the first runner seen for each identifier, preserving order."""
    seen = set()
    unique = []
    for runner in runners:
        if runner.identifier in seen:
            continue
        seen.add(runner.identifier)
        unique.append(runner)
    return unique


def _build_runner(**fields: Any) -> Runner:
    try:
        return Runner(**fields)
    except ValidationError as e:
        raise MalformedSourceError(
            f"Invalid runner data for {fields.get('identifier')!r}: {e.error_count()} error(s)"
        ) from e


def _build_event(**fields: Any) -> NormalizedEvent:
    try:
        return NormalizedEvent(**fields)
    except ValidationError as e:
        raise MalformedSourceError(f"Invalid event data: {e}") from e


def find_runner_column(columns: Any) -> int:
    """Index of the first column whose label is an accepted runner label."""
    if not isinstance(columns, list):
        raise MalformedSourceError("Horaro schedule columns are not a list.")
    for index, label in enumerate(columns):
        if isinstance(label, str) and label.strip().lower() in VALID_RUNNER_COLUMNS:
            return index
    raise MalformedSourceError(
        "Could not normalize Horaro data; runner column not found in schedule."
    )


class Normalizer:
    """Converts raw platform payloads into NormalizedEvent objects."""

    def normalize(
        self, raw_payload: Optional[Dict[str, Any]], source: Source
    ) -> NormalizedEvent:
        """Normalizes one raw event payload.

        Raises:
            EventNotFoundError: the payload marks the event as nonexistent.
            MalformedSourceError: a required field is missing or mistyped.
        """
        logger.debug(f"Starting normalization for {source.value}")

        if source == Source.OENGUS:
            event = self._normalize_oengus_data(raw_payload)
        elif source == Source.HORARO:
            event = self._normalize_horaro_data(raw_payload)
        else:
            raise MalformedSourceError(
                f"Normalization not implemented for source: {source.value}"
            )

        logger.info(
            f"Normalized {source.value} event '{event.name}' with {len(event.runners)} runners"
            + (
                f" and {len(event.scheduled)} scheduled entries"
                if event.scheduled is not None
                else ""
            )
        )
        return event

    def _normalize_oengus_data(
        self, raw_payload: Optional[Dict[str, Any]]
    ) -> NormalizedEvent:
        if not raw_payload or raw_payload.get("marathon") is None:
            raise EventNotFoundError("No marathon with the provided slug exists.")

        marathon = raw_payload["marathon"]
        if not isinstance(marathon, dict) or not isinstance(marathon.get("name"), str):
            raise MalformedSourceError("Oengus marathon info has no name.")

        submissions = raw_payload.get("submissions") or []
        if not isinstance(submissions, list):
            raise MalformedSourceError("Oengus submissions are not a list.")

        runners = []
        for submission in submissions:
            try:
                user = submission["user"]
                username = user["username"]
            except (KeyError, TypeError) as e:
                raise MalformedSourceError(
                    f"Oengus submission without a user: {submission!r}"
                ) from e

            runners.append(
                _build_runner(
                    identifier=username,
                    declared_pronoun=user.get("pronouns"),
                    external_handles=self._oengus_handles(user.get("connections")),
                )
            )

        return _build_event(
            source=Source.OENGUS,
            name=marathon["name"],
            runners=_dedupe_runners(runners),
            scheduled=self._oengus_scheduled(raw_payload.get("schedule")),
        )

    @staticmethod
    def _oengus_handles(connections: Any) -> Dict[Platform, Optional[str]]:
        if connections is None:
            return {}
        if not isinstance(connections, list):
            raise MalformedSourceError("Oengus user connections are not a list.")

        handles: Dict[Platform, Optional[str]] = {}
        for connection in connections:
            if not isinstance(connection, dict):
                raise MalformedSourceError(
                    f"Oengus connection is not an object: {connection!r}"
                )
            platform = OENGUS_CONNECTION_PLATFORMS.get(connection.get("platform"))
            if platform and platform not in handles:
                handles[platform] = connection.get("username")
        return handles

    @staticmethod
    def _oengus_scheduled(schedule: Any) -> Optional[List[str]]:
        if not isinstance(schedule, dict) or schedule.get("lines") is None:
            return None

        lines = schedule["lines"]
        if not isinstance(lines, list):
            raise MalformedSourceError("Oengus schedule lines are not a list.")

        scheduled = []
        for line in lines:
            if not isinstance(line, dict):
                raise MalformedSourceError(f"Oengus schedule line is not an object: {line!r}")
            line_runners = line.get("runners") or []
            if not isinstance(line_runners, list):
                raise MalformedSourceError("Oengus schedule line runners are not a list.")
            for runner in line_runners:
                username = runner.get("username") if isinstance(runner, dict) else None
                if not isinstance(username, str):
                    raise MalformedSourceError(
                        f"Oengus schedule runner without a username: {runner!r}"
                    )
                scheduled.append(username)
        return scheduled

    def _normalize_horaro_data(
        self, raw_payload: Optional[Dict[str, Any]]
    ) -> NormalizedEvent:
        if not raw_payload:
            raise EventNotFoundError("No Horaro schedule exists at the provided path.")

        try:
            schedule = raw_payload["schedule"]
            columns = schedule["columns"]
            items = schedule["items"]
            name = schedule["name"]
        except (KeyError, TypeError) as e:
            raise MalformedSourceError(
                f"Could not normalize Horaro data; missing field {e}."
            ) from e

        runner_column = find_runner_column(columns)
        if not isinstance(items, list):
            raise MalformedSourceError("Horaro schedule items are not a list.")

        runners = []
        for item in items:
            if not isinstance(item, dict):
                raise MalformedSourceError(f"Horaro schedule item is not an object: {item!r}")
            data = item.get("data") or []
            if not isinstance(data, list):
                raise MalformedSourceError("Horaro schedule item data is not a list.")
            cell = data[runner_column] if runner_column < len(data) else None
            if not cell:
                continue
            if not isinstance(cell, str):
                raise MalformedSourceError(f"Horaro runner cell is not text: {cell!r}")
            for name_part in cell.split(","):
                username = name_part.strip()
                if username:
                    runners.append(_build_runner(identifier=username))

        return _build_event(
            source=Source.HORARO,
            name=name,
            runners=_dedupe_runners(runners),
            scheduled=None,
        )
