# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SYMFLUENCE Team <dev@symfluence.org>

"""
Per-observation activation state machine.

Every observation element is in one of four states. Only writing a new
value makes an element ACTIVE; outlier rejection (deactivate) and missing
data (set_missing) are the only ways out of ACTIVE.

    state \\ event | SET_VALUE | SET_MISSING | DEACTIVATE
    --------------+-----------+-------------+------------
    INACTIVE      | ACTIVE    | MISSING     | INACTIVE
    ACTIVE        | ACTIVE    | MISSING     | DEACTIVATED
    DEACTIVATED   | ACTIVE    | MISSING     | DEACTIVATED
    MISSING       | ACTIVE    | MISSING     | MISSING
"""

from enum import Enum
from typing import Dict, Tuple


class ActivationState(Enum):
    """Activation state of a single observation element."""
    ACTIVE = 'active'
    DEACTIVATED = 'deactivated'
    MISSING = 'missing'
    INACTIVE = 'inactive'


class ObservationEvent(Enum):
    """Operations that can change an element's activation state."""
    SET_VALUE = 'set_value'
    SET_MISSING = 'set_missing'
    DEACTIVATE = 'deactivate'


_A = ActivationState
_E = ObservationEvent

TRANSITIONS: Dict[Tuple[ActivationState, ObservationEvent], ActivationState] = {
    (_A.INACTIVE, _E.SET_VALUE): _A.ACTIVE,
    (_A.INACTIVE, _E.SET_MISSING): _A.MISSING,
    (_A.INACTIVE, _E.DEACTIVATE): _A.INACTIVE,

    (_A.ACTIVE, _E.SET_VALUE): _A.ACTIVE,
    (_A.ACTIVE, _E.SET_MISSING): _A.MISSING,
    (_A.ACTIVE, _E.DEACTIVATE): _A.DEACTIVATED,

    (_A.DEACTIVATED, _E.SET_VALUE): _A.ACTIVE,
    (_A.DEACTIVATED, _E.SET_MISSING): _A.MISSING,
    (_A.DEACTIVATED, _E.DEACTIVATE): _A.DEACTIVATED,

    (_A.MISSING, _E.SET_VALUE): _A.ACTIVE,
    (_A.MISSING, _E.SET_MISSING): _A.MISSING,
    (_A.MISSING, _E.DEACTIVATE): _A.MISSING,
}


def transition(state: ActivationState, event: ObservationEvent) -> ActivationState:
    """Return the state reached from ``state`` when ``event`` is applied."""
    return TRANSITIONS[(state, event)]


def active_count_delta(old: ActivationState, new: ActivationState) -> int:
    """Change in a block's active count caused by moving from ``old`` to ``new``."""
    return int(new is ActivationState.ACTIVE) - int(old is ActivationState.ACTIVE)
