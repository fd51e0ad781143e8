import logging

import requests
from django.conf import settings
from django.dispatch import receiver

from . import events

logger = logging.getLogger(__name__)

_EVENT_NAMES = {
    events.new_course_mate: "NewCourseMateEvent",
    events.lecturer_accepted_to_course: "LecturerAcceptToCourseEvent",
    events.lecturer_rejected_to_course: "LecturerRejectToCourseEvent",
    events.lecturer_invited_to_course: "LecturerInvitedToCourseEvent",
}


def format_event_payload(event_name: str, payload: dict) -> dict:
    return {"type": event_name, **payload}


def send_course_event(event_name: str, payload: dict) -> None:
    """Mirror a course event to the configured webhook."""
    url = getattr(settings, "COURSE_EVENTS_WEBHOOK_URL", "")
    if not url:
        logger.debug("Skipping %s webhook: COURSE_EVENTS_WEBHOOK_URL missing", event_name)
        return

    try:
        response = requests.post(
            url, json=format_event_payload(event_name, payload), timeout=10
        )
        if response.status_code >= 400:
            logger.warning(
                "Course events webhook returned %s: %s",
                response.status_code,
                response.text,
            )
    except requests.RequestException:
        logger.exception("Failed to deliver %s", event_name)


@receiver(events.new_course_mate)
@receiver(events.lecturer_accepted_to_course)
@receiver(events.lecturer_rejected_to_course)
@receiver(events.lecturer_invited_to_course)
def publish_course_event(sender, signal, **payload):
    event_name = _EVENT_NAMES[signal]
    logger.info("%s: %s", event_name, payload)
    send_course_event(event_name, payload)
