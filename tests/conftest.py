"""Global pytest fixtures and configuration.

This module provides shared fixtures for all tests including:
- A clean engine configuration per test
- A call recorder for asserting behavior invocation order
- The user registration workflow used across executor tests
"""
from __future__ import annotations

import hashlib
from typing import Any, Callable, List

import pytest

from saga_reactor.config import Config, reset_config
from saga_reactor.orchestration.workflow_engine.sources import from_input, from_result
from saga_reactor.orchestration.workflow_engine.steps import StepDefinition, WorkflowDefinition
from saga_reactor.result import Failure, Success


@pytest.fixture(autouse=True)
def clean_saga_env(monkeypatch):
    """Remove SAGA_* variables and the cached config before each test."""
    for key in (
        "SAGA_LOG_LEVEL",
        "SAGA_LOG_FORMAT",
        "SAGA_LOG_FILE",
        "SAGA_ENABLE_METRICS",
        "SAGA_CAPTURE_STEP_EXCEPTIONS",
        "SAGA_VALIDATE_DEFINITIONS",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> Config:
    """Default engine configuration with metrics enabled."""
    return Config()


class CallRecorder:
    """Collects ``(kind, step)`` tuples from step behaviors."""

    def __init__(self):
        self.calls: List[tuple] = []

    def of(self, kind: str) -> List[str]:
        return [step for recorded_kind, step in self.calls if recorded_kind == kind]

    def run(self, step: str, value: Any = None) -> Callable[..., Any]:
        def _run(args, context):
            self.calls.append(("run", step))
            return Success(value if value is not None else step)

        return _run

    def failing_run(self, step: str, error: Any = "boom") -> Callable[..., Any]:
        def _run(args, context):
            self.calls.append(("run", step))
            return Failure(error)

        return _run

    def undo(self, step: str, outcome: Any = None) -> Callable[..., Any]:
        def _undo(result, args, context):
            self.calls.append(("undo", step))
            return outcome if outcome is not None else Success()

        return _undo

    def compensate(self, step: str, outcome: Any = None) -> Callable[..., Any]:
        def _compensate(error, args, context):
            self.calls.append(("compensate", step))
            return outcome if outcome is not None else Success()

        return _compensate


@pytest.fixture
def recorder() -> CallRecorder:
    return CallRecorder()


def _validate_email(args, context):
    email = args["email"]
    if email and "@" in email:
        return Success(email)
    return Failure("Email must contain @")


def _hash_password(args, context):
    return Success(hashlib.sha256(args["password"].encode()).hexdigest())


def _create_user(args, context):
    return Success({"id": 42, "email": args["email"], "password_hash": args["password_hash"]})


@pytest.fixture
def registration_definition() -> WorkflowDefinition:
    """validate_email -> hash_password -> create_user, returning create_user."""
    return WorkflowDefinition(
        name="user_registration",
        inputs=["email", "password"],
        steps=[
            StepDefinition(
                name="validate_email",
                arguments={"email": from_input("email")},
                run=_validate_email,
            ),
            StepDefinition(
                name="hash_password",
                arguments={"password": from_input("password")},
                run=_hash_password,
            ),
            StepDefinition(
                name="create_user",
                arguments={
                    "email": from_result("validate_email"),
                    "password_hash": from_result("hash_password"),
                },
                run=_create_user,
            ),
        ],
        return_step="create_user",
    )
