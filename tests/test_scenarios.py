import os
import tempfile

import pytest

from poise.coaching.errors import ScenarioValidationError
from poise.coaching.scenario_library import builtin_scenarios, default_catalog
from poise.coaching.scenarios import (
    ScenarioCatalog, load_scenarios, next_node, opening_line, scenario_from_dict
)


def _tiny_scenario(**overrides):
    data = {
        "id": "tiny",
        "title": "Tiny Talk",
        "description": "Two lines",
        "opening_node": "hello",
        "nodes": {
            "hello": {
                "content": "Hello!",
                "responses": [{"id": "hi", "content": "Hi there", "next_node_id": "bye"}],
            },
            "bye": {"content": "Bye!", "responses": [{"id": "ciao", "content": "Ciao"}]},
        },
        "success_conditions": {"min_score": 40},
    }
    data.update(overrides)
    return data


def test_builtin_catalog_registers_every_scenario():
    catalog = default_catalog()
    ids = [s.id for s in catalog.list_scenarios()]
    assert ids == [s.id for s in builtin_scenarios()]
    for expected in ("coffee-shop", "house-party", "bar-flirtation", "job-interview",
                     "first-date", "conflict-resolution"):
        assert expected in catalog


def test_opening_line_comes_from_opening_node():
    scenario = default_catalog().get_scenario("coffee-shop")
    assert opening_line(scenario).startswith("Hi there!")


def test_dangling_reference_is_rejected():
    data = _tiny_scenario()
    data["nodes"]["bye"]["responses"][0]["next_node_id"] = "nowhere"
    with pytest.raises(ScenarioValidationError) as excinfo:
        ScenarioCatalog([scenario_from_dict(data)])
    assert "nowhere" in str(excinfo.value)


def test_missing_opening_node_is_rejected():
    with pytest.raises(ScenarioValidationError):
        ScenarioCatalog([scenario_from_dict(_tiny_scenario(opening_node="absent"))])


def test_duplicate_id_is_rejected_unless_replacing():
    catalog = ScenarioCatalog([scenario_from_dict(_tiny_scenario())])
    with pytest.raises(ScenarioValidationError):
        catalog.register(scenario_from_dict(_tiny_scenario()))

    catalog.register(scenario_from_dict(_tiny_scenario(title="Tiny Talk v2")), replace=True)
    assert catalog.get_scenario("tiny").title == "Tiny Talk v2"
    assert len(catalog) == 1


def test_malformed_data_raises_validation_error():
    data = _tiny_scenario()
    del data["success_conditions"]
    with pytest.raises(ScenarioValidationError):
        scenario_from_dict(data)


def test_unknown_id_returns_none():
    assert default_catalog().get_scenario("karaoke-night") is None


def test_title_fragment_uses_first_word():
    catalog = default_catalog()
    assert catalog.find_scenario_by_title_fragment("coffee please").id == "coffee-shop"
    assert catalog.find_scenario_by_title_fragment("JOB").id == "job-interview"
    assert catalog.find_scenario_by_title_fragment("") is None
    assert catalog.find_scenario_by_title_fragment("   ") is None
    assert catalog.find_scenario_by_title_fragment("zeppelin") is None


def test_next_node_follows_responses():
    scenario = default_catalog().get_scenario("coffee-shop")
    assert next_node(scenario, "initial", "book-response").id == "book-discussion"
    assert next_node(scenario, "respectful-exit", "polite-thanks") is None
    with pytest.raises(KeyError):
        next_node(scenario, "initial", "no-such-response")


def test_every_builtin_node_is_reachable_or_terminal():
    for scenario in builtin_scenarios():
        for node in scenario.nodes.values():
            for response in node.responses:
                assert response.next_node_id is None or response.next_node_id in scenario.nodes


def test_load_scenarios_from_yaml():
    content = """
scenarios:
  - id: elevator
    title: Elevator Small Talk
    description: Chat with a colleague between floors
    opening_node: start
    nodes:
      start:
        content: "Busy day?"
        responses:
          - id: agree
            content: "Always! You?"
    success_conditions:
      min_score: 30
      required_emotions: [calm]
      max_duration: 60000
    display:
      difficulty: Beginner
      gradient: ["#000000", "#FFFFFF"]
"""
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "extra.yml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        scenarios = load_scenarios(path)

    assert len(scenarios) == 1
    scenario = scenarios[0]
    assert scenario.id == "elevator"
    assert scenario.success_conditions.required_emotions == frozenset({"calm"})
    assert scenario.display.gradient == ("#000000", "#FFFFFF")

    catalog = default_catalog()
    catalog.register(scenario)
    assert catalog.get_scenario("elevator").opening.content == "Busy day?"
