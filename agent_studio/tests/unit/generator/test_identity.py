"""Tests for project and binding naming rules."""

from __future__ import annotations

from agent_studio.generator.identity import (
    ProjectIdentity,
    binding_name,
    class_prefix,
    is_valid_package,
    slugify,
    unique_bindings,
)


def test_project_identity_from_names() -> None:
    identity = ProjectIdentity.from_names(" Travel Planner ", "com.example.travel")

    assert identity.display_name == "Travel Planner"
    assert identity.slug == "travel-planner"
    assert identity.project_name == "travel-planner-agent"
    assert identity.agent_class == "TravelPlannerAgent"
    assert identity.source_dir == "src/main/java/com/example/travel"
    assert identity.archive_filename == "travel-planner-agent.zip"


def test_names_starting_with_digits_get_prefixed() -> None:
    assert class_prefix("3D printer") == "Agent3DPrinter"
    assert slugify("3D printer!") == "3d-printer"
    assert binding_name("42 answers", fallback="tool") == "tool42Answers"


def test_binding_name_avoids_keywords_and_empty_names() -> None:
    assert binding_name("Weather API", fallback="tool") == "weatherAPI"
    assert binding_name("class", fallback="tool") == "toolClass"
    assert binding_name("!!!", fallback="tool") == "tool"


def test_unique_bindings_suffixes_collisions() -> None:
    assert unique_bindings(["Search", "search", "SEARCH tool"], fallback="tool") == ["search", "search2", "sEARCHTool"]
    assert unique_bindings(["a b", "A-B", "a_b"], fallback="tool") == ["aB", "aB2", "aB3"]
    assert unique_bindings(["main"], fallback="delegate", reserved=["main"]) == ["main2"]


def test_is_valid_package() -> None:
    assert is_valid_package("com.example.agent")
    assert is_valid_package("agent")
    assert not is_valid_package("")
    assert not is_valid_package("com..example")
    assert not is_valid_package("1com.example")
    assert not is_valid_package("com.example.new")
    assert not is_valid_package("com-example")
