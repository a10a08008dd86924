"""Pytest configuration shared across test modules."""

from __future__ import annotations

import os
from typing import Any, Dict

import pytest

os.environ.setdefault("LINKWEAVER_LOG_LEVEL", "DEBUG")

from linkweaver.engine.config import InjectionOptions, load_config  # noqa: E402
from linkweaver.engine.types import LinkTarget  # noqa: E402

SEO_ARTICLE = (
    "<p>Search visibility starts with careful planning. Effective keyword research drives "
    "long-term organic growth for small publishers.</p>\n"
    "<h2>Building authority</h2>\n"
    "<p>Strong backlinks still matter, and a steady link building strategy compounds over "
    "many months of consistent outreach work.</p>\n"
    "<h2>Measuring results</h2>\n"
    "<p>Teams should track conversion rate optimization experiments alongside their organic "
    "traffic reports every single week.</p>"
)

SEO_DESTINATIONS = [
    {"url": "/keyword-research", "title": "Keyword Research Fundamentals Guide"},
    {"url": "/link-building", "title": "Link Building Strategy Playbook"},
    {"url": "/cro", "title": "Conversion Rate Optimization Experiments"},
]


@pytest.fixture()
def engine_config():
    """Provide a mutable copy of the default engine configuration."""

    return load_config(None)


@pytest.fixture()
def make_options():
    def factory(**overrides: Any) -> InjectionOptions:
        values: Dict[str, Any] = {"min_links": 0, "min_distance_between_links": 40}
        values.update(overrides)
        return InjectionOptions.from_config(None, values)

    return factory


@pytest.fixture()
def article() -> str:
    return SEO_ARTICLE


@pytest.fixture()
def destinations():
    return [dict(item) for item in SEO_DESTINATIONS]


def make_target(url: str, title: str) -> LinkTarget:
    return LinkTarget(url=url, title=title)


@pytest.fixture(name="make_target")
def make_target_fixture():
    return make_target
