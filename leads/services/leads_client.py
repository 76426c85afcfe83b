"""
Leads API client used by the professional's side of the lead offer flow.
"""
import logging
import json
from typing import List, Optional

import httpx
from django.conf import settings

from leads.services.normalization import normalize
from leads.services.records import AssignmentRecord
from leads.services.validation import InvalidPayloadError, validate_lead_list

logger = logging.getLogger(__name__)

# Older backends answer a late response with 400 and one of these messages
_STALE_MESSAGES = ('not pending', 'expired', 'already')


class LeadsClientError(Exception):
    """Base class for leads API client failures."""
    pass


class LeadsTransportError(LeadsClientError):
    """Network failure or timeout talking to the leads API."""
    pass


class LeadsApiError(LeadsClientError):
    """The leads API answered with a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class LeadNotFoundError(LeadsApiError):
    """The assignment does not exist or is not offered to this professional."""
    pass


class StaleLeadError(LeadsApiError):
    """The assignment already changed state (responded to, expired, or taken elsewhere)."""
    pass


def _format_response(response: httpx.Response) -> str:
    """Return a readable response string (pretty JSON if possible)."""
    try:
        data = response.json()
        return json.dumps(data, indent=2, ensure_ascii=False)
    except Exception:
        return response.text


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        return str(data.get('error') or data.get('message') or f"HTTP {response.status_code}")
    return f"HTTP {response.status_code}"


def _headers() -> dict:
    headers = {
        'Content-Type': 'application/json',
        'Accept': 'application/json',
    }
    token = settings.LEADS_API_TOKEN
    if token:
        headers['Authorization'] = f'Token {token}'
    return headers


def _url(path: str) -> str:
    return settings.LEADS_API_URL.rstrip('/') + '/' + path


def raise_for_status(response: httpx.Response) -> dict:
    """
    Map a leads API response onto the client error taxonomy.

    Returns:
        Decoded JSON body of a successful response

    Raises:
        LeadNotFoundError: 404
        StaleLeadError: 409, or a 400 whose message says the lead moved on
        LeadsApiError: Any other failure, including a 2xx with success=false
    """
    status_code = response.status_code

    if 200 <= status_code < 300:
        try:
            body = response.json()
        except ValueError as e:
            raise LeadsApiError("Malformed JSON in leads API response", status_code) from e
        if isinstance(body, dict) and body.get('success') is False:
            raise LeadsApiError(str(body.get('error') or 'Request failed'), status_code)
        return body if isinstance(body, dict) else {}

    message = _error_message(response)
    if status_code == 404:
        raise LeadNotFoundError(message, status_code)
    if status_code == 409:
        raise StaleLeadError(message, status_code)
    if status_code == 400 and any(marker in message.lower() for marker in _STALE_MESSAGES):
        raise StaleLeadError(message, status_code)
    raise LeadsApiError(message, status_code)


def fetch_my_leads(status: Optional[str] = None) -> List[AssignmentRecord]:
    """
    Fetch the professional's leads, each embedding its intake.

    Args:
        status: Optional status filter passed through to the API

    Returns:
        Validated assignment records

    Raises:
        LeadsTransportError: On network/timeout errors
        LeadsApiError: On a failed response
    """
    url = _url('my-leads')
    params = {'status': status} if status else None
    logger.info(f"Fetching leads from {url}")

    try:
        response = httpx.get(
            url,
            params=params,
            headers=_headers(),
            timeout=settings.LEADS_API_TIMEOUT
        )
    except httpx.TimeoutException as e:
        logger.error(f"Timeout fetching leads: {e}")
        raise LeadsTransportError(f"Timed out fetching leads: {e}") from e
    except httpx.HTTPError as e:
        logger.error(f"HTTP error fetching leads: {e}")
        raise LeadsTransportError(f"Could not reach leads API: {e}") from e

    logger.info(f"Leads API response: {response.status_code}")
    body = raise_for_status(response)
    try:
        return validate_lead_list(normalize(body))
    except InvalidPayloadError as e:
        logger.error(f"Malformed leads response: {e}")
        raise LeadsApiError(f"Malformed leads response: {e}", response.status_code) from e


def respond_to_lead(assignment_id: str, action: str, declined_reason: Optional[str] = None) -> dict:
    """
    Submit an accept/decline decision for one assignment.

    Single attempt only: a failure is reported to the caller, never retried.

    Args:
        assignment_id: Assignment to respond to
        action: 'accept' or 'decline'
        declined_reason: Free-text reason, decline only

    Returns:
        The normalized response body

    Raises:
        LeadsTransportError: On network/timeout errors
        LeadNotFoundError, StaleLeadError, LeadsApiError: On a failed response
    """
    if action not in ('accept', 'decline'):
        raise ValueError(f"Unknown action: {action!r}")

    payload = {'assignmentId': assignment_id, 'action': action}
    if action == 'decline' and declined_reason is not None:
        payload['declinedReason'] = declined_reason

    url = _url('respond')
    logger.info(f"Sending {action} for assignment {assignment_id} to {url}")
    logger.debug(f"Payload: {payload}")

    try:
        response = httpx.post(
            url,
            json=payload,
            headers=_headers(),
            timeout=settings.LEADS_API_TIMEOUT
        )
    except httpx.TimeoutException as e:
        logger.error(f"Timeout sending {action} for assignment {assignment_id}: {e}")
        raise LeadsTransportError(f"Timed out sending {action}: {e}") from e
    except httpx.HTTPError as e:
        logger.error(f"HTTP error sending {action} for assignment {assignment_id}: {e}")
        raise LeadsTransportError(f"Could not reach leads API: {e}") from e

    logger.info(f"Leads API response: {response.status_code}")
    logger.debug("Leads API response body:\n%s", _format_response(response))
    return normalize(raise_for_status(response))


def accept_lead(assignment_id: str) -> dict:
    return respond_to_lead(assignment_id, 'accept')


def decline_lead(assignment_id: str, declined_reason: Optional[str] = None) -> dict:
    return respond_to_lead(assignment_id, 'decline', declined_reason)
