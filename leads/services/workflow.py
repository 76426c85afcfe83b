"""
Response workflow for a single lead detail view.

LeadDetailSession holds the per-view state for one assignment: the record
last fetched from the API, its countdown, the in-flight flag that guards
against double submission, and any error or redirect to surface.

Local state is only a cache of the server's. After any accept or decline,
successful or not, the session re-fetches the lead list; it never patches
its own copy of the assignment.
"""
import logging
from datetime import datetime
from typing import Callable, Optional

from django.conf import settings
from django.utils import timezone

from leads.services import leads_client
from leads.services.countdown import Countdown
from leads.services.leads_client import (
    LeadNotFoundError,
    LeadsClientError,
    StaleLeadError,
)
from leads.services.lifecycle import (
    EXPIRED_LABEL,
    EffectiveState,
    case_link,
    effective_state,
    format_countdown,
)
from leads.services.records import AssignmentRecord

logger = logging.getLogger(__name__)

# Preset decline reason codes offered to the professional
DECLINE_REASON_CODES = frozenset({
    'outside_specialization',
    'at_capacity',
    'corridor_not_covered',
    'requirements_unclear',
    'other',
})
MIN_OTHER_REASON_LENGTH = 10

STALE_MESSAGE = 'This lead has already been handled or has expired.'
NOT_FOUND_MESSAGE = 'This lead is no longer available.'


def decline_reason(code: str, other_text: str = '') -> str:
    """
    Turn a preset decline reason code into the text sent to the API.

    Preset codes become readable text ('at_capacity' -> 'at capacity');
    'other' needs an explanation of at least 10 characters and is sent as
    'other: <explanation>'.

    Raises:
        ValueError: On an unknown code or a too-short explanation
    """
    if code not in DECLINE_REASON_CODES:
        raise ValueError(f"Unknown decline reason: {code!r}")
    if code == 'other':
        explanation = (other_text or '').strip()
        if len(explanation) < MIN_OTHER_REASON_LENGTH:
            raise ValueError(
                f"Please provide at least {MIN_OTHER_REASON_LENGTH} characters for the reason"
            )
        return f"other: {explanation}"
    return code.replace('_', ' ')


class LeadDetailSession:
    """
    State and actions behind one open lead detail view.

    Args:
        assignment_id: Id of the assignment being viewed
        client: Object providing fetch_my_leads, accept_lead and decline_lead
            (defaults to the leads_client module)
        clock: Returns the current aware datetime
        tick_interval: Seconds between countdown ticks
    """

    def __init__(
        self,
        assignment_id,
        client=leads_client,
        clock: Callable[[], datetime] = timezone.now,
        tick_interval: float = 1.0,
    ):
        self.assignment_id = str(assignment_id)
        self.client = client
        self.clock = clock
        self.tick_interval = tick_interval

        self.assignment: Optional[AssignmentRecord] = None
        self.countdown: Optional[Countdown] = None
        self.busy = False
        self.stale = False
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self.redirect_to: Optional[str] = None
        self.created_case_id: Optional[str] = None

    # -- loading -----------------------------------------------------------

    def open(self) -> bool:
        """Load the lead and start the countdown if it is still open for a response."""
        loaded = self.load()
        if loaded and self.countdown is not None:
            self.countdown.start()
        return loaded

    def load(self) -> bool:
        """
        Fetch the lead list and pick out this view's assignment.

        Returns:
            True if the assignment was found. On a missing assignment or a
            failed first load, redirect_to is set to the lead list.
        """
        try:
            leads = self.client.fetch_my_leads()
        except LeadsClientError as e:
            logger.error(f"Failed to fetch lead {self.assignment_id}: {e}")
            self.error = str(e)
            if self.assignment is None:
                self._redirect_to_list()
            else:
                self.stale = True
            return False

        found = next((lead for lead in leads if lead.id == self.assignment_id), None)
        if found is None:
            logger.info(f"Lead {self.assignment_id} not in lead list, redirecting")
            self._set_assignment(None)
            self._redirect_to_list()
            return False

        self._set_assignment(found)
        return True

    def refresh(self, keep_error: bool = False) -> bool:
        """
        Re-fetch the lead; keeps the timer running if the lead is still open.

        A successful reload clears the last error unless ``keep_error`` is set,
        which is how an accept/decline failure stays visible after its re-fetch.
        """
        running = self.countdown is not None and self.countdown.running
        previous_error = self.error
        loaded = self.load()
        if keep_error and previous_error:
            self.error = previous_error
        elif loaded:
            self.error = None
        if loaded and running and self.countdown is not None:
            self.countdown.start()
        return loaded

    def _set_assignment(self, assignment: Optional[AssignmentRecord]) -> None:
        if self.countdown is not None:
            self.countdown.cancel()
            self.countdown = None

        self.assignment = assignment
        self.stale = False
        if assignment is None:
            return

        if effective_state(assignment, self.clock()) == EffectiveState.PENDING_ACTIVE:
            self.countdown = Countdown(
                assignment.expires_at,
                clock=self.clock,
                on_expire=self._on_expire,
                interval=self.tick_interval,
            )
            self.countdown.tick()

    def _redirect_to_list(self) -> None:
        self.redirect_to = settings.LEAD_LIST_PATH

    def _on_expire(self) -> None:
        logger.info(f"Lead {self.assignment_id} expired while open")

    # -- derived state -----------------------------------------------------

    @property
    def state(self) -> Optional[EffectiveState]:
        if self.assignment is None:
            return None
        return effective_state(self.assignment, self.clock())

    @property
    def can_respond(self) -> bool:
        """Accept/decline controls are enabled only for a fresh, active, idle lead."""
        return (
            not self.busy
            and not self.stale
            and self.state == EffectiveState.PENDING_ACTIVE
        )

    @property
    def case_path(self) -> Optional[str]:
        """Target of the "View Case" link once the lead is accepted."""
        if self.assignment is None:
            return None
        link = case_link(self.assignment)
        if link is None and self.created_case_id and self.state == EffectiveState.ACCEPTED:
            link = settings.CASE_DETAIL_PATH.format(case_id=self.created_case_id)
        return link

    def status_label(self) -> Optional[str]:
        state = self.state
        if state is None:
            return None
        if state == EffectiveState.PENDING_ACTIVE:
            if self.countdown is not None:
                return self.countdown.tick()
            return format_countdown(self.assignment.expires_at, self.clock())
        if state == EffectiveState.PENDING_EXPIRED:
            return EXPIRED_LABEL
        if state == EffectiveState.ACCEPTED:
            return 'Accepted'
        if self.assignment.declined_reason:
            return f"Declined: {self.assignment.declined_reason}"
        return 'Declined'

    # -- actions -----------------------------------------------------------

    def accept(self) -> bool:
        """
        Accept the lead. On success the backend creates a case.

        Returns:
            True if the backend accepted the response
        """
        return self._respond('accept')

    def decline(self, reason: Optional[str] = None) -> bool:
        """
        Decline the lead, passing the reason through unchanged.

        Returns:
            True if the backend accepted the response
        """
        return self._respond('decline', reason)

    def _respond(self, action: str, reason: Optional[str] = None) -> bool:
        if not self.can_respond:
            logger.info(
                f"Blocked {action} on lead {self.assignment_id}: "
                f"state={self.state}, busy={self.busy}, stale={self.stale}"
            )
            return False

        self.busy = True
        self.error = None
        self.notice = None
        succeeded = False
        try:
            if action == 'accept':
                result = self.client.accept_lead(self.assignment_id)
            else:
                result = self.client.decline_lead(self.assignment_id, reason)
        except StaleLeadError as e:
            logger.warning(f"Lead {self.assignment_id} {action} rejected as stale: {e}")
            self.error = STALE_MESSAGE
        except LeadNotFoundError as e:
            logger.warning(f"Lead {self.assignment_id} {action} rejected, not found: {e}")
            self.error = NOT_FOUND_MESSAGE
        except LeadsClientError as e:
            logger.error(f"Lead {self.assignment_id} {action} failed: {e}")
            self.error = f"Failed to {action} lead: {e}"
        else:
            succeeded = True
            if action == 'accept':
                data = (result or {}).get('data') or {}
                case_id = (data.get('case') or {}).get('id')
                self.created_case_id = str(case_id) if case_id is not None else None
                self.notice = 'Lead accepted! Case created.'
            else:
                self.notice = 'Lead declined. Next specialist being notified.'
            logger.info(f"Lead {self.assignment_id} {action} succeeded")
        finally:
            self.busy = False

        self.refresh(keep_error=True)
        return succeeded

    # -- teardown ----------------------------------------------------------

    def close(self) -> None:
        if self.countdown is not None:
            self.countdown.cancel()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
