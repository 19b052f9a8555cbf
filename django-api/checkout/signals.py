"""Domain-effect signal.

The reconciler emits effects through SignalEffectSink; the application
(the ebooks app) connects receivers that apply them to ownership state.
Receivers get ``effect`` (a DomainEffect) as keyword argument.
"""

import logging

from django.dispatch import Signal

from checkout.domain import DomainEffect
from checkout.stores.interfaces import EffectSink

logger = logging.getLogger(__name__)

payment_reconciled = Signal()


class SignalEffectSink(EffectSink):
    """Dispatches each effect as a ``payment_reconciled`` signal."""

    def emit(self, effect: DomainEffect) -> None:
        logger.info("Emitting %s for %s", effect.kind.value, effect.transaction_id)
        payment_reconciled.send(sender=self.__class__, effect=effect)
