"""Shared fixtures for the NeuroLint test suite."""

from __future__ import annotations

import asyncio
import time

import pytest

from neurolint.domain.enums import LayerId
from neurolint.domain.values import LayerDescriptor, TransformOptions, TransformOutput
from neurolint.infrastructure.config import OrchestratorConfig
from neurolint.infrastructure.event_bus import EventBus
from neurolint.infrastructure.session_logger import SessionLogger
from neurolint.layers.registry import DEFAULT_REGISTRY, LayerRegistry
from neurolint.measurement.metrics_store import MetricsStore
from neurolint.services.orchestrator import Orchestrator

# ---------------------------------------------------------------------------
# Source samples
# ---------------------------------------------------------------------------

CLEAN_CODE = "const x = 1;\n"

UNKEYED_LIST = (
    "export function List({ items }) {\n"
    "  return <ul>{items.map(item => <li>{item.name}</li>)}</ul>;\n"
    "}\n"
)

MESSY_COMPONENT = (
    "import React, { useState } from 'react';\n"
    "'use client';\n"
    "\n"
    "export default function Page({ items }) {\n"
    "  var saved = localStorage.getItem('items');\n"
    "  console.log(saved);\n"
    "  return (\n"
    "    <div>\n"
    "      <p>&quot;Items&quot;</p>\n"
    "      {items.map(item => <span>{item}</span>)}\n"
    "      <img src=\"/logo.png\" />\n"
    "    </div>\n"
    "  );\n"
    "}\n"
)

TSCONFIG = '{\n  "compilerOptions": {\n    "target": "es5",\n    "strict": false\n  }\n}\n'


@pytest.fixture
def clean_code() -> str:
    return CLEAN_CODE


@pytest.fixture
def unkeyed_list() -> str:
    return UNKEYED_LIST


@pytest.fixture
def messy_component() -> str:
    return MESSY_COMPONENT


@pytest.fixture
def tsconfig() -> str:
    return TSCONFIG


# ---------------------------------------------------------------------------
# Stub layers
# ---------------------------------------------------------------------------


def _explode(code: str, options: TransformOptions) -> TransformOutput:
    raise RuntimeError("layer exploded")


def _corrupt(code: str, options: TransformOptions) -> TransformOutput:
    return TransformOutput(code=code + "\n{", change_count=1, improvements=("broke it",))


def _lie_about_changes(code: str, options: TransformOptions) -> TransformOutput:
    return TransformOutput(code=code + "\n// edited", change_count=0)


def _not_an_output(code: str, options: TransformOptions) -> str:
    return code


async def _hang(code: str, options: TransformOptions) -> TransformOutput:
    await asyncio.sleep(5)
    return TransformOutput.unchanged(code)


def _block(code: str, options: TransformOptions) -> TransformOutput:
    time.sleep(1.0)
    return TransformOutput.unchanged(code)


async def _async_append(code: str, options: TransformOptions) -> TransformOutput:
    await asyncio.sleep(0)
    return TransformOutput(code=code + "// async\n", change_count=1, improvements=("appended",))


def stub_layer(transform, layer_id: LayerId = LayerId.ENTITY_CLEANUP, name: str = "Stub") -> LayerDescriptor:
    return LayerDescriptor(id=layer_id, name=name, description="test stub", transform=transform)


@pytest.fixture
def exploding_layer() -> LayerDescriptor:
    return stub_layer(_explode, name="Exploding")


@pytest.fixture
def corrupting_layer() -> LayerDescriptor:
    return stub_layer(_corrupt, name="Corrupting")


@pytest.fixture
def lying_layer() -> LayerDescriptor:
    return stub_layer(_lie_about_changes, name="Lying")


@pytest.fixture
def wrong_type_layer() -> LayerDescriptor:
    return stub_layer(_not_an_output, name="WrongType")


@pytest.fixture
def hanging_layer() -> LayerDescriptor:
    return stub_layer(_hang, name="Hanging")


@pytest.fixture
def blocking_layer() -> LayerDescriptor:
    return stub_layer(_block, name="Blocking")


@pytest.fixture
def async_layer() -> LayerDescriptor:
    return stub_layer(_async_append, name="AsyncAppend")


@pytest.fixture
def exploding_registry(exploding_layer: LayerDescriptor) -> LayerRegistry:
    return DEFAULT_REGISTRY.with_layer(exploding_layer)


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def metrics() -> MetricsStore:
    return MetricsStore()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def session_logger() -> SessionLogger:
    return SessionLogger(session_id="session_test")


@pytest.fixture
def orchestrator(metrics: MetricsStore, session_logger: SessionLogger, event_bus: EventBus) -> Orchestrator:
    return Orchestrator(
        config=OrchestratorConfig(layer_timeout_seconds=2.0),
        metrics=metrics,
        session_logger=session_logger,
        event_bus=event_bus,
    )
