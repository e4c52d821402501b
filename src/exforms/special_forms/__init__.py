"""Special forms: case, cond, for_, try_, with_ and receive."""

from exforms.special_forms.binding import with_
from exforms.special_forms.comprehension import Expression, for_, list_generator
from exforms.special_forms.dispatch import case, cond
from exforms.special_forms.receive import receive
from exforms.special_forms.rescue import FailureWithReason, attach_reason, normalize_failure, try_

__all__ = [
    'Expression',
    'FailureWithReason',
    'attach_reason',
    'case',
    'cond',
    'for_',
    'list_generator',
    'normalize_failure',
    'receive',
    'try_',
    'with_',
]
