"""
orderdesk/flow/states.py

Purpose: Defines the auth session states

- UNINITIALIZED -> RESTORING -> AUTHENTICATED / ANONYMOUS
- AUTHENTICATED <-> ANONYMOUS via login, logout and session expiry
- Single source of truth for which transitions are allowed
- Metadata for each state (loading, authenticated)
"""

from enum import Enum
from typing import Dict, List
from dataclasses import dataclass


class SessionState(str, Enum):
    """
    Lifecycle of the client-side auth session.
    """

    # Before the stored session has been looked at
    UNINITIALIZED = "UNINITIALIZED"

    # Stored token found, revalidating with the API
    RESTORING = "RESTORING"

    AUTHENTICATED = "AUTHENTICATED"
    ANONYMOUS = "ANONYMOUS"


@dataclass
class StateMetadata:
    """
    Metadata associated with each session state.
    """
    name: SessionState
    display_name: str
    is_loading: bool = False
    is_authenticated: bool = False
    description: str = ""


STATE_METADATA: Dict[SessionState, StateMetadata] = {
    SessionState.UNINITIALIZED: StateMetadata(
        name=SessionState.UNINITIALIZED,
        display_name="Starting",
        is_loading=True,
        description="Storage not read yet"
    ),
    SessionState.RESTORING: StateMetadata(
        name=SessionState.RESTORING,
        display_name="Restoring session",
        is_loading=True,
        description="Stored session applied optimistically while the profile is revalidated"
    ),
    SessionState.AUTHENTICATED: StateMetadata(
        name=SessionState.AUTHENTICATED,
        display_name="Signed in",
        is_authenticated=True,
        description="Token and profile present and accepted by the API"
    ),
    SessionState.ANONYMOUS: StateMetadata(
        name=SessionState.ANONYMOUS,
        display_name="Signed out",
        description="No session; protected routes redirect to login"
    ),
}


STATE_TRANSITIONS: Dict[SessionState, List[SessionState]] = {
    SessionState.UNINITIALIZED: [
        SessionState.RESTORING,
        SessionState.ANONYMOUS,  # Nothing stored
    ],
    SessionState.RESTORING: [
        SessionState.AUTHENTICATED,
        SessionState.ANONYMOUS,  # Revalidation failed or 401
    ],
    SessionState.AUTHENTICATED: [
        SessionState.AUTHENTICATED,  # Profile refreshed
        SessionState.ANONYMOUS,  # Logout or session expired
    ],
    SessionState.ANONYMOUS: [
        SessionState.AUTHENTICATED,  # Login
        SessionState.ANONYMOUS,  # Failed login, repeated logout
    ],
}


def is_valid_transition(from_state: SessionState, to_state: SessionState) -> bool:
    """
    Checks if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is allowed, False otherwise
    """
    allowed_transitions = STATE_TRANSITIONS.get(from_state, [])
    return to_state in allowed_transitions


def get_state_metadata(state: SessionState) -> StateMetadata:
    return STATE_METADATA.get(state, StateMetadata(
        name=state,
        display_name=state.value,
        description="Unknown state"
    ))
