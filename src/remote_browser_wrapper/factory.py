"""Factories for constructing components from configuration."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from .config import HighlightConfig, LifecycleConfig, LoggingConfig, WaitConfig, WrapperSettings
from .lifecycle.manager import SessionManager
from .lifecycle.providers import AlivenessChecker, ProviderRegistry
from .wait.clock import Clock, Sleeper
from .wait.implicit_wait import ImplicitWaitWrapper
from .wait.repeater import RetryPolicy
from .wrapper.highlighting import HighlightingWrapper
from .wrapper.logging_wrapper import LoggingWrapper
from .wrapper.stale_tolerant import StaleTolerantWrapper


def build_retry_policy(
    config: WaitConfig,
    *,
    clock: Optional[Clock] = None,
    sleeper: Optional[Sleeper] = None,
) -> RetryPolicy:
    return RetryPolicy.from_config(config, clock=clock, sleeper=sleeper)


def build_session_manager(
    config: LifecycleConfig,
    *,
    registry: Optional[ProviderRegistry] = None,
    aliveness_checker: Optional[AlivenessChecker] = None,
) -> SessionManager:
    return SessionManager.from_config(config, registry=registry, aliveness_checker=aliveness_checker)


def build_logging_session(session: Any, config: LoggingConfig) -> Any:
    return LoggingWrapper(session, dump_browser_logs=config.dump_browser_logs).session


def build_highlighting_session(session: Any, config: HighlightConfig, *, sleeper: Optional[Sleeper] = None) -> Any:
    return HighlightingWrapper(
        session,
        pause=timedelta(seconds=config.pause),
        action_style=config.action_style,
        found_style=config.found_style,
        sleeper=sleeper,
    ).session


def decorate_session(
    session: Any,
    config: WrapperSettings,
    *,
    clock: Optional[Clock] = None,
    sleeper: Optional[Sleeper] = None,
) -> Any:
    """Stack the wrappers enabled in ``config`` around ``session``.

    Layers from the inside out: stale-element recovery, client-side implicit
    wait, highlighting, logging.
    """

    decorated = session
    if config.stale_tolerant:
        decorated = StaleTolerantWrapper(decorated).session
    if config.implicit_wait:
        decorated = ImplicitWaitWrapper(
            decorated,
            policy=build_retry_policy(config.wait, clock=clock, sleeper=sleeper),
        ).session
    if config.highlight.enabled:
        decorated = build_highlighting_session(decorated, config.highlight, sleeper=sleeper)
    if config.logging.enabled:
        decorated = build_logging_session(decorated, config.logging)
    return decorated
