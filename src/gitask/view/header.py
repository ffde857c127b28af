# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding


def header(context_description: Optional[str], sub_header: Optional[str] = None) -> None:
    """Print the report name and, when one applies, the active context."""
    if sub_header is not None:
        print(Padding(f"[sandy_brown]{sub_header}[/sandy_brown]", (1, 0, 0, 1)))
    if context_description:
        print(Padding(f"[plum1]context: {context_description}[/plum1]", (0, 1)))
