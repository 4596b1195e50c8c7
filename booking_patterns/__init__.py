"""Booking Pattern Templates: learn a customer's usual booking and redraft it.

Architecture Overview
=====================

A medical-equipment rental business books surgical equipment sets for
hospitals.  Most customers book the same equipment with the same surgeon
through the same sales representative again and again.  This package turns
that history into per-customer **templates** and turns a template into a
submission-ready **booking request**.

Analysis (``booking_patterns.analysis``)
  raw payloads → ``normalize_records`` → ``group_by_customer`` →
  ``find_most_common_combination`` → ``create_booking_template`` →
  ``rank_templates``.  Ties go to the combination seen first.

Synthesis (``booking_patterns.synthesis``)
  ``find_template`` (alias ``lookup``; customer / surgeon substring match) →
  ``resolve_schedule`` (keywords, weekend skip, time of day) +
  ``derive_material_code`` → ``build_request_body``.

Key Design Decisions
--------------------
- **Strategies**: the deterministic pipeline is the default; a remote
  Anthropic model (``remote_model``) fills the same template contract plus
  confidence, insights and a suggested request.  ``get_analyzer`` selects one.
- **State**: ``TemplateStore`` holds immutable, versioned snapshots swapped
  under a lock.  Everything else is pure.
- **Failure model**: the core never raises on bad data; defects are absorbed
  by defaults and lookup misses return ``TemplateNotFound``.
- **Dual Interface**: FastAPI server + argparse CLI.

Package Structure
-----------------
- ``booking_patterns/models.py`` - pydantic models (camelCase on the wire)
- ``booking_patterns/config.py`` - configuration from environment variables
- ``booking_patterns/prompts.py`` - prompts for the remote analyzer
- ``booking_patterns/analysis/`` - normalization, counting, templates, strategies
- ``booking_patterns/synthesis/`` - lookup, scheduling, request documents
- ``booking_patterns/services/`` - store, payload extraction, cache, metrics
- ``booking_patterns/api/`` - FastAPI routes and schemas
- ``booking_patterns/server.py`` - FastAPI application
- ``booking_patterns/main.py`` - CLI
"""

from booking_patterns.analysis import analyze, get_analyzer, normalize_records
from booking_patterns.services.template_store import TemplateStore
from booking_patterns.synthesis import (
    derive_material_code,
    find_template,
    lookup,
    propose_booking,
    resolve_schedule,
    synthesize_request,
)

__all__ = [
    "TemplateStore",
    "analyze",
    "derive_material_code",
    "find_template",
    "get_analyzer",
    "lookup",
    "normalize_records",
    "propose_booking",
    "resolve_schedule",
    "synthesize_request",
]
