"""
Scenario scripts: branching dialogue graphs and the catalog that holds them.

A scenario is registered once and validated up front, so traversal code can
assume every node reference resolves.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any, Tuple, FrozenSet, Iterator

import yaml

from .errors import ScenarioValidationError

logger = logging.getLogger("scenarios")


@dataclass(frozen=True)
class NodeCondition:
    """
    Emotional context in which a node's phrasing fits best.

    Advisory only: nothing gates traversal on it.
    """
    required_emotion: Optional[str] = None
    min_intensity: Optional[float] = None
    context: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DialogueResponse:
    """A candidate reply; no next_node_id means the branch ends here."""
    id: str
    content: str
    next_node_id: Optional[str] = None
    score_modifier: Optional[int] = None
    emotion_trigger: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.next_node_id is None


@dataclass(frozen=True)
class DialogueNode:
    """One line the conversation partner says, plus the candidate replies."""
    id: str
    content: str
    responses: Tuple[DialogueResponse, ...] = ()
    condition: Optional[NodeCondition] = None

    def find_response(self, response_id: str) -> Optional[DialogueResponse]:
        for response in self.responses:
            if response.id == response_id:
                return response
        return None


@dataclass(frozen=True)
class SuccessConditions:
    """What counts as a successful run of a scenario."""
    min_score: int
    required_emotions: FrozenSet[str] = frozenset()
    max_duration: Optional[int] = None  # milliseconds, soft limit


@dataclass(frozen=True)
class ScenarioDisplay:
    """UI-facing projection of a scenario (cards, avatars, objectives)."""
    difficulty: str = "Beginner"
    mode: str = "social"
    background: str = "cafe"
    icon: str = "message-circle"
    gradient: Tuple[str, ...] = ("#8B5CF6", "#3B82F6")
    avatar: Optional[str] = None
    primary_objective: str = ""
    bonus_objectives: Tuple[str, ...] = ()
    success_behaviors: Tuple[str, ...] = ()
    failure_behaviors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScenarioScript:
    """A named branching dialogue template with success criteria."""
    id: str
    title: str
    description: str
    opening_node: str
    nodes: Dict[str, DialogueNode]
    success_conditions: SuccessConditions
    display: ScenarioDisplay = field(default_factory=ScenarioDisplay)

    def node(self, node_id: str) -> DialogueNode:
        return self.nodes[node_id]

    @property
    def opening(self) -> DialogueNode:
        return self.nodes[self.opening_node]


def validate_scenario(scenario: ScenarioScript) -> None:
    """
    Check that every node reference in a scenario resolves.

    Raises:
        ScenarioValidationError: listing every problem found
    """
    problems: List[str] = []

    if not scenario.id:
        problems.append("scenario id is empty")
    if scenario.opening_node not in scenario.nodes:
        problems.append(f"opening node '{scenario.opening_node}' is not defined")

    for key, node in scenario.nodes.items():
        if key != node.id:
            problems.append(f"node key '{key}' does not match node id '{node.id}'")

        seen_responses = set()
        for response in node.responses:
            if response.id in seen_responses:
                problems.append(f"node '{key}' has duplicate response id '{response.id}'")
            seen_responses.add(response.id)

            if response.next_node_id is not None and response.next_node_id not in scenario.nodes:
                problems.append(
                    f"response '{response.id}' in node '{key}' points to missing node "
                    f"'{response.next_node_id}'"
                )

    if problems:
        raise ScenarioValidationError(f"Scenario '{scenario.id}' is invalid: " + "; ".join(problems))


def _condition_from_dict(data: Optional[Dict[str, Any]]) -> Optional[NodeCondition]:
    if not data:
        return None
    return NodeCondition(
        required_emotion=data.get("emotion"),
        min_intensity=data.get("min_intensity"),
        context=tuple(data.get("context", ())),
    )


def scenario_from_dict(data: Dict[str, Any]) -> ScenarioScript:
    """
    Build a ScenarioScript from plain data (YAML/JSON shaped).

    Args:
        data: Mapping with id, title, description, opening_node, nodes and
              success_conditions; display is optional

    Returns:
        ScenarioScript (not yet validated; register() validates)
    """
    try:
        nodes = {}
        for key, node_data in data["nodes"].items():
            responses = tuple(
                DialogueResponse(
                    id=r["id"],
                    content=r["content"],
                    next_node_id=r.get("next_node_id"),
                    score_modifier=r.get("score_modifier"),
                    emotion_trigger=r.get("emotion_trigger"),
                )
                for r in node_data.get("responses", ())
            )
            nodes[key] = DialogueNode(
                id=node_data.get("id", key),
                content=node_data["content"],
                responses=responses,
                condition=_condition_from_dict(node_data.get("conditions")),
            )

        success = data["success_conditions"]
        display_data = dict(data.get("display") or {})
        for list_field in ("gradient", "bonus_objectives", "success_behaviors", "failure_behaviors"):
            if list_field in display_data:
                display_data[list_field] = tuple(display_data[list_field])

        return ScenarioScript(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            opening_node=data["opening_node"],
            nodes=nodes,
            success_conditions=SuccessConditions(
                min_score=int(success["min_score"]),
                required_emotions=frozenset(success.get("required_emotions", ())),
                max_duration=success.get("max_duration"),
            ),
            display=ScenarioDisplay(**display_data),
        )
    except (KeyError, TypeError) as e:
        raise ScenarioValidationError(f"Malformed scenario data: {e}") from e


class ScenarioCatalog:
    """Registry of validated scenario scripts keyed by canonical id."""

    def __init__(self, scenarios: Optional[List[ScenarioScript]] = None):
        self._scenarios: Dict[str, ScenarioScript] = {}
        for scenario in scenarios or []:
            self.register(scenario)

    def register(self, scenario: ScenarioScript, replace: bool = False) -> None:
        """
        Validate and add a scenario.

        Raises:
            ScenarioValidationError: on dangling references or a duplicate id
        """
        validate_scenario(scenario)
        if scenario.id in self._scenarios and not replace:
            raise ScenarioValidationError(f"Scenario '{scenario.id}' is already registered")
        self._scenarios[scenario.id] = scenario
        logger.debug(f"Registered scenario {scenario.id} with {len(scenario.nodes)} nodes")

    def get_scenario(self, scenario_id: str) -> Optional[ScenarioScript]:
        """Look up by id; None when absent."""
        return self._scenarios.get(scenario_id)

    def find_scenario_by_title_fragment(self, text: str) -> Optional[ScenarioScript]:
        """
        Find the first scenario whose title contains the first word of text.

        Case-insensitive. Prefer get_scenario(); this exists for callers that
        only have a display title. Empty or blank text matches nothing rather
        than the first scenario.
        """
        words = (text or "").strip().lower().split()
        if not words:
            return None
        fragment = words[0]
        for scenario in self._scenarios.values():
            if fragment in scenario.title.lower():
                return scenario
        return None

    def list_scenarios(self, mode: Optional[str] = None) -> List[ScenarioScript]:
        """All scenarios in registration order, optionally filtered by display mode."""
        scenarios = list(self._scenarios.values())
        if mode is not None:
            scenarios = [s for s in scenarios if s.display.mode == mode]
        return scenarios

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self._scenarios

    def __len__(self) -> int:
        return len(self._scenarios)

    def __iter__(self) -> Iterator[ScenarioScript]:
        return iter(self._scenarios.values())


def opening_line(scenario: ScenarioScript) -> str:
    """What the conversation partner says first."""
    return scenario.opening.content


def next_node(scenario: ScenarioScript, node_id: str, response_id: str) -> Optional[DialogueNode]:
    """
    Follow a response out of a node.

    Returns:
        The next node, or None when the response ends the branch

    Raises:
        KeyError: if node_id or response_id is unknown
    """
    response = scenario.node(node_id).find_response(response_id)
    if response is None:
        raise KeyError(f"Node '{node_id}' has no response '{response_id}'")
    if response.is_terminal:
        return None
    return scenario.node(response.next_node_id)


def load_scenarios(path: str) -> List[ScenarioScript]:
    """
    Read scenarios from a YAML file holding a top-level "scenarios" list.

    Scenarios are parsed but not registered; pass them to a catalog.
    """
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    scenarios = [scenario_from_dict(item) for item in data.get("scenarios", [])]
    logger.info(f"Loaded {len(scenarios)} scenarios from {path}")
    return scenarios
