"""
Optimizer update rules for WaveScape.

Both optimizers consume a (possibly perturbed) gradient and the scheduled
learning rate, mutate the OptimizerState buffers, and clamp the new
position into the domain so divergence can never leave the world.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Union

import numpy as np

from wavescape.models.landscape import Domain
from wavescape.models.optimizer_state import OptimizerState
from wavescape.types import PointLike, Vector2

logger = logging.getLogger(__name__)

MAX_MOMENTUM = 0.999


class OptimizerKind(Enum):
    """Selectable optimizer variants."""
    SGD = "sgd"
    ADAM = "adam"

    @classmethod
    def parse(cls, value: Union["OptimizerKind", str]) -> "OptimizerKind":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in ("momentum", "nesterov"):
            key = "sgd"
        try:
            return cls(key)
        except ValueError:
            valid = [k.value for k in cls]
            raise ValueError(f"Unknown optimizer kind '{value}', must be one of {valid}") from None


class Optimizer(ABC):
    """
    Abstract base class for optimizer update rules.
    """

    @property
    @abstractmethod
    def kind(self) -> OptimizerKind:
        """The variant implemented by this optimizer."""
        pass

    def evaluation_point(self, state: OptimizerState, settings: Any) -> Vector2:
        """
        Where the gradient should be taken for the next update.

        :param state: Current optimizer state.
        :param settings: Live simulation settings.
        :return: Point at which the controller evaluates the gradient.
        """
        return state.position.copy()

    @abstractmethod
    def update(self, state: OptimizerState, gradient: PointLike, lr: float,
               settings: Any, domain: Domain) -> Vector2:
        """
        Apply one update.

        :param state: Optimizer state, mutated in place.
        :param gradient: Gradient taken at evaluation_point().
        :param lr: Scheduled learning rate.
        :param settings: Live simulation settings (momentum, nesterov, ...).
        :param domain: World bounds the new position is clamped into.
        :return: The new, clamped position.
        """
        pass


class MomentumOptimizer(Optimizer):
    """
    Momentum-accelerated gradient descent, optionally with Nesterov lookahead.

    Update rule:
        v_new = mu * v_old - lr * grad
        x_new = x_old + v_new

    With Nesterov enabled the gradient is taken at the lookahead point
    x + mu * v instead of x. With mu = 0 this is plain gradient descent.
    Velocity on an axis where the position hit the domain wall is zeroed,
    so the lookahead point stays within one domain span of the world.
    """

    @property
    def kind(self):
        return OptimizerKind.SGD

    @staticmethod
    def _momentum(settings: Any) -> float:
        return min(MAX_MOMENTUM, max(0.0, float(settings.momentum)))

    def evaluation_point(self, state, settings):
        if settings.nesterov:
            return state.position + self._momentum(settings) * state.velocity
        return state.position.copy()

    def update(self, state, gradient, lr, settings, domain):
        grad = np.asarray(gradient, dtype=float)
        mu = self._momentum(settings)

        velocity = mu * state.velocity - lr * grad
        moved = state.position + velocity
        clamped = domain.clamp(moved)

        # Walls are inelastic: momentum along a clamped axis is dropped
        velocity[clamped != moved] = 0.0

        state.velocity = velocity
        state.position = clamped
        return state.position


class AdamOptimizer(Optimizer):
    """
    Adam optimizer with bias-corrected moment estimates.

    Update rules:
        m = b1*m + (1-b1)*g            (first moment)
        v = b2*v + (1-b2)*g^2          (second moment)
        m_hat = m / (1 - b1^t)         (bias correction)
        v_hat = v / (1 - b2^t)         (bias correction)
        x = x - lr * m_hat / (sqrt(v_hat) + eps)

    t is step_count + 1, so the first update from zeroed moments moves each
    coordinate by about lr against the sign of the gradient.
    """

    def __init__(self, beta1: float = 0.9, beta2: float = 0.999, epsilon: float = 1e-8):
        if not (0.0 <= beta1 < 1.0 and 0.0 <= beta2 < 1.0):
            raise ValueError(f"Adam betas must be in [0, 1), got ({beta1}, {beta2})")
        if not epsilon > 0:
            raise ValueError(f"Adam epsilon must be positive, got {epsilon}")
        self.beta1 = float(beta1)
        self.beta2 = float(beta2)
        self.epsilon = float(epsilon)

    @property
    def kind(self):
        return OptimizerKind.ADAM

    def update(self, state, gradient, lr, settings, domain):
        grad = np.asarray(gradient, dtype=float)
        t = state.step_count + 1

        state.moment1 = self.beta1 * state.moment1 + (1 - self.beta1) * grad
        state.moment2 = self.beta2 * state.moment2 + (1 - self.beta2) * (grad ** 2)

        m_hat = state.moment1 / (1 - self.beta1 ** t)
        v_hat = state.moment2 / (1 - self.beta2 ** t)

        state.position = domain.clamp(state.position - lr * m_hat / (np.sqrt(v_hat) + self.epsilon))
        return state.position


def create_optimizer(kind: Union[OptimizerKind, str], **kwargs) -> Optimizer:
    """
    Factory for optimizer instances.

    Args:
        kind: 'sgd' (momentum / Nesterov) or 'adam'
        **kwargs: Adam hyperparameters (beta1, beta2, epsilon); ignored for SGD

    Returns:
        Optimizer
    """
    kind = OptimizerKind.parse(kind)
    if kind is OptimizerKind.ADAM:
        return AdamOptimizer(**kwargs)
    return MomentumOptimizer()
