"""From a chosen template to a submission-ready booking request."""

from booking_patterns.synthesis.lookup import find_template, lookup
from booking_patterns.synthesis.material import UNKNOWN_MATERIAL_CODE, derive_material_code
from booking_patterns.synthesis.proposal import propose_booking
from booking_patterns.synthesis.request_body import build_request_body, synthesize_request
from booking_patterns.synthesis.schedule import parse_time_of_day, resolve_schedule

__all__ = [
    "UNKNOWN_MATERIAL_CODE",
    "build_request_body",
    "derive_material_code",
    "find_template",
    "lookup",
    "parse_time_of_day",
    "propose_booking",
    "resolve_schedule",
    "synthesize_request",
]
