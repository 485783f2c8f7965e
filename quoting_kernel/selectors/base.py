"""
Module: quoting_kernel.selectors.base
Responsibility: Common base for read-only record store queries.
Architecture position: Kernel > Selectors.  Imports db/, models/ and
    domain/ only; the recorder in services/ is the single writer.

Selectors borrow the caller's session and never add, flush or commit.
They hand back frozen domain DTOs so that nothing above the kernel holds
a live ORM row.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    def __init__(self, session: Session):
        self.session = session
