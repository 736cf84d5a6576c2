"""
Synthetic meetings and summaries.

Used whenever live calendar data or an LLM summary cannot be produced. The
meeting set is fixed in shape; timestamps are offsets from the caller's
`now`. Summaries are a pure function of the meeting.
"""

from datetime import UTC, datetime, timedelta

from meetsync.models.domain.meeting_domain import (
    Attendee,
    Meeting,
    MeetingKind,
    Organizer,
)

# (id, title, start offset h, end offset h, description, attendees, location, meet link, organizer)
_UPCOMING = [
    (
        "mock-1", "Team Standup", 2, 2.5, "Daily team synchronization meeting",
        [("john@example.com", "John Doe", "accepted"), ("jane@example.com", "Jane Smith", "accepted")],
        "Conference Room A", "https://meet.google.com/mock-1", ("john@example.com", "John Doe"),
    ),
    (
        "mock-2", "Product Planning Session", 24, 25, "Q1 product roadmap planning",
        [("sarah@example.com", "Sarah Johnson", "accepted"), ("mike@example.com", "Mike Wilson", "tentative")],
        "Zoom", "https://zoom.us/mock-2", ("sarah@example.com", "Sarah Johnson"),
    ),
    (
        "mock-3", "Client Demo", 48, 49, "Showcase new features to the client",
        [("client@example.com", "Client Representative", "accepted")],
        "Virtual", "https://meet.google.com/mock-3", ("you@example.com", "You"),
    ),
    (
        "mock-4", "Engineering Review", 72, 73, "Code review and architecture discussion",
        [
            ("tech-lead@example.com", "Tech Lead", "accepted"),
            ("engineer1@example.com", "Engineer 1", "accepted"),
            ("engineer2@example.com", "Engineer 2", "accepted"),
        ],
        "Conference Room B", "https://meet.google.com/mock-4", ("tech-lead@example.com", "Tech Lead"),
    ),
    (
        "mock-5", "Sprint Retrospective", 120, 121.5, "Review the past sprint and plan improvements",
        [("scrum-master@example.com", "Scrum Master", "accepted"), ("team@example.com", "Team", "accepted")],
        "Virtual", "https://meet.google.com/mock-5", ("scrum-master@example.com", "Scrum Master"),
    ),
]

_PAST = [
    (
        "mock-past-1", "Weekly Sync", -2, -1.5, "Weekly team synchronization meeting",
        [("alice@example.com", "Alice Brown", "accepted"), ("bob@example.com", "Bob Green", "accepted")],
        "Conference Room A", "https://meet.google.com/mock-past-1", ("alice@example.com", "Alice Brown"),
    ),
    (
        "mock-past-2", "Design Review", -24, -23, "Review UI/UX designs for the new feature",
        [("designer@example.com", "Design Team", "accepted"), ("pm@example.com", "Product Manager", "accepted")],
        "Zoom", "https://zoom.us/mock-past-2", ("designer@example.com", "Design Team"),
    ),
    (
        "mock-past-3", "Sprint Planning", -48, -46, "Plan tasks and goals for the upcoming sprint",
        [
            ("team-lead@example.com", "Team Lead", "accepted"),
            ("dev1@example.com", "Developer 1", "accepted"),
            ("dev2@example.com", "Developer 2", "accepted"),
        ],
        "Conference Room B", "https://meet.google.com/mock-past-3", ("team-lead@example.com", "Team Lead"),
    ),
    (
        "mock-past-4", "Customer Feedback Session", -72, -71, "Gather feedback from key customers",
        [("customer1@example.com", "Customer 1", "accepted"), ("customer2@example.com", "Customer 2", "accepted")],
        "Virtual", "https://meet.google.com/mock-past-4", ("cs@example.com", "Customer Success"),
    ),
    (
        "mock-past-5", "Technical Architecture Discussion", -120, -118.5,
        "Discuss system architecture and scalability",
        [
            ("architect@example.com", "System Architect", "accepted"),
            ("senior-dev@example.com", "Senior Developer", "accepted"),
        ],
        "Conference Room C", "https://meet.google.com/mock-past-5", ("architect@example.com", "System Architect"),
    ),
]

_MEETING_TYPES = [
    (("standup", "stand-up", "daily"), "team standup"),
    (("1:1", "one-on-one", "1-on-1"), "one-on-one"),
    (("review", "retro"), "review session"),
    (("planning", "sprint"), "planning session"),
    (("interview",), "interview"),
    (("demo", "presentation"), "presentation or demo"),
]

_CLOSINGS = {
    "team standup": "The team likely discussed daily progress, blockers, and upcoming priorities.",
    "one-on-one": (
        "This session provided an opportunity for individual feedback, "
        "career development, and personal check-in."
    ),
    "review session": (
        "The team reviewed recent work, gathered feedback, and identified areas for improvement."
    ),
    "planning session": (
        "Participants collaborated on upcoming objectives, resource allocation, and timeline planning."
    ),
}
_DEFAULT_CLOSING = "This session facilitated collaboration and alignment among team members."


def _build(rows: list[tuple], now: datetime) -> list[Meeting]:
    meetings = []
    for (
        meeting_id, title, start_h, end_h, description, attendees, location, link, organizer,
    ) in rows:
        meetings.append(
            Meeting(
                id=meeting_id,
                title=title,
                start=(now + timedelta(hours=start_h)).isoformat(),
                end=(now + timedelta(hours=end_h)).isoformat(),
                description=description,
                attendees=[
                    Attendee(email=email, name=name, response_status=status)
                    for email, name, status in attendees
                ],
                location=location,
                meet_link=link,
                organizer=Organizer(email=organizer[0], name=organizer[1]),
            )
        )
    return meetings


def mock_upcoming_meetings(now: datetime | None = None) -> list[Meeting]:
    return _build(_UPCOMING, now or datetime.now(UTC))


def mock_past_meetings(now: datetime | None = None) -> list[Meeting]:
    return _build(_PAST, now or datetime.now(UTC))


def mock_meetings(kind: MeetingKind, now: datetime | None = None) -> list[Meeting]:
    if kind == MeetingKind.PAST:
        return mock_past_meetings(now)
    return mock_upcoming_meetings(now)


def calculate_duration(start: datetime | None, end: datetime | None) -> str:
    """Human duration: '30 minutes', '1 hour', '2 hours', '1h 30m'."""
    if not start or not end:
        return "0 minutes"
    diff_mins = int((end - start).total_seconds() // 60)
    if diff_mins < 60:
        return f"{diff_mins} minutes"
    hours, mins = divmod(diff_mins, 60)
    if mins > 0:
        return f"{hours}h {mins}m"
    return f"{hours} hour{'s' if hours > 1 else ''}"


def time_of_day(start: datetime) -> str:
    if start.hour < 12:
        return "morning"
    if start.hour < 17:
        return "afternoon"
    return "evening"


def classify_meeting_type(title: str) -> str:
    lowered = title.lower()
    for keywords, meeting_type in _MEETING_TYPES:
        if any(keyword in lowered for keyword in keywords):
            return meeting_type
    return "general discussion"


def generate_mock_summary(meeting: Meeting) -> str:
    """Templated summary from calendar metadata alone."""
    start = (meeting.start_datetime() or datetime.now(UTC)).astimezone(UTC)
    duration = calculate_duration(meeting.start_datetime(), meeting.end_datetime())
    meeting_type = classify_meeting_type(meeting.title)
    attendee_count = len(meeting.attendees)

    summary = (
        f'This {duration} {meeting_type} titled "{meeting.title}" took place on '
        f"{start.strftime('%A')} {time_of_day(start)}. "
    )

    if attendee_count > 0:
        plural = "s" if attendee_count > 1 else ""
        summary += f"With {attendee_count} participant{plural} in attendance, "

    if meeting.meet_link:
        summary += "the meeting was conducted virtually via Google Meet. "
    elif meeting.location:
        summary += f"the meeting was held at {meeting.location}. "

    description = meeting.description or ""
    if len(description) > 20:
        ellipsis = "..." if len(description) > 100 else ""
        summary += f"The agenda included: {description[:100]}{ellipsis}"
    else:
        summary += _CLOSINGS.get(meeting_type, _DEFAULT_CLOSING)

    return summary
