import os
import sys
from pathlib import Path

import pytest

# Ensure project packages can be imported
sys.path.append(os.getcwd())

from progression.core.config import EngineConfig
from progression.core.events import EventBus
from progression.state.progress import InMemoryProgressStore
from progression.state.progression import ProgressionStore
from curriculum.dialogue.actions import accept_task, open_task_submission, set_state
from curriculum.dialogue.conditions import state_is, task_active, task_completed
from curriculum.dialogue.tree import DialogueChoice, DialogueNode, DialogueTree
from curriculum.modules.definition import NPC, define_module
from curriculum.modules.handlers import HandlerRegistry
from curriculum.modules.registry import ModuleRegistry
from curriculum.runtime import Curriculum
from curriculum.tasks.task import Task, text_length_validator
from curriculum.unlock.evaluator import RequirementEvaluator
from curriculum.unlock.requirements import module_complete, task_complete

CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"


@pytest.fixture
def content_dir():
    """Bundled sample content."""
    return CONTENT_DIR


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def recorded(event_bus):
    """Collects every published progression and dialogue event type."""
    from progression.core.events import DialogueEvent, ProgressionEvent

    events = []
    for event_type in list(ProgressionEvent) + list(DialogueEvent):
        event_bus.subscribe(event_type, events.append, weak=False)
    return events


@pytest.fixture
def config():
    return EngineConfig(custom_check_timeout=0.5)


@pytest.fixture
def progress():
    return InMemoryProgressStore()


@pytest.fixture
def progression():
    return ProgressionStore()


@pytest.fixture
def registry():
    return ModuleRegistry()


@pytest.fixture
def handlers():
    return HandlerRegistry()


@pytest.fixture
def evaluator(progress, progression, registry, config):
    return RequirementEvaluator(progress, progression, ownership=registry, config=config)


@pytest.fixture
def write_intro():
    return Task(
        id="write_intro",
        name="Write an Intro",
        description="Say hello in a few words.",
        validator=text_length_validator(5),
    )


@pytest.fixture
def second_step():
    return Task(
        id="second_step",
        name="Second Step",
        unlock_requirement=task_complete("write_intro"),
    )


@pytest.fixture
def guide(write_intro, second_step):
    """
    Guide NPC owning both intro tasks.

    Entry: "waiting" while write_intro is active, "again" once met,
    "hello" otherwise.
    """
    hello = DialogueNode(
        id="hello",
        lines=("Hi! I'm the guide.",),
        choices={
            "help": DialogueChoice(text="Can I help?", next="offer", actions=(set_state("met_guide", True),)),
            "bye": DialogueChoice(text="Bye"),
        },
    )
    offer = DialogueNode(
        id="offer",
        lines=("Tell me about yourself.",),
        choices={"accept": DialogueChoice(text="Sure", actions=(accept_task(write_intro),))},
    )
    again = DialogueNode(
        id="again",
        lines=("Good to see you again.",),
        choices={
            "quiz": DialogueChoice(
                text="Any more work?",
                condition=task_completed(write_intro),
                actions=(accept_task(second_step),),
            ),
            "bye": DialogueChoice(text="Bye"),
        },
    )
    waiting = DialogueNode(
        id="waiting",
        task_id="write_intro",
        lines=("Ready to introduce yourself?",),
        choices={
            "submit": DialogueChoice(text="Yes", actions=(open_task_submission(write_intro),)),
            "later": DialogueChoice(text="Later"),
        },
    )
    tree = DialogueTree.with_entry(
        nodes=(hello, offer, again, waiting),
        default=hello,
        conditions=[(task_active(write_intro), waiting), (state_is("met_guide"), again)],
    )
    return NPC(id="guide", name="Guide", tasks=(write_intro, second_step), dialogue=tree)


@pytest.fixture
def intro_module(guide):
    return define_module("intro", "Intro", interactables=(guide,))


@pytest.fixture
def forest_module():
    return define_module(
        "forest",
        "Forest",
        tasks=(Task(id="find_tree", name="Find a Tree"),),
        unlock_requirement=module_complete("intro"),
    )


@pytest.fixture
def curriculum(intro_module, forest_module, config, event_bus):
    """Curriculum over the intro and forest modules."""
    return Curriculum(
        registry=ModuleRegistry([intro_module, forest_module]),
        config=config,
        events=event_bus,
    )
