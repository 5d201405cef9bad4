"""Per-render mutable state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Session:
    """State threaded through one top-level render call.

    | Field            | Meaning                                                  |
    |------------------|----------------------------------------------------------|
    | depth            | indent levels pushed by the renderer; labels need one    |
    | for_header       | inside `for (...)`: separators become `, `, no newlines  |
    | first_statement  | the next statement opens a body and needs no separator   |
    | needs_terminator | the last statement written must be followed by `;`       |

    Invariants:
    - a fresh Session is created for each top-level call and discarded after it
    - depth returns to its starting value when the call completes normally
    """

    depth: int = 0
    for_header: bool = False
    first_statement: bool = True
    needs_terminator: bool = False
