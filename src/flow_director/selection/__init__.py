"""
Selection module - opponent move selection modulated by the director's plan.

Provides the main entry points:
- OpponentSelector.pick_action(): session-bound picker
- pick_action(): functional form
"""

from flow_director.selection.opponent import (
    OpponentSelector,
    pick_action,
    score_actions,
    window,
    lookahead_value,
    reply_value,
)

__all__ = [
    "OpponentSelector",
    "pick_action",
    "score_actions",
    "window",
    "lookahead_value",
    "reply_value",
]
