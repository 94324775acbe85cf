"""Domain services."""

from .orders import OrderService, TRANSITIONS, CANCELLABLE, can_transition, calculate_total

__all__ = ['OrderService', 'TRANSITIONS', 'CANCELLABLE', 'can_transition', 'calculate_total']
