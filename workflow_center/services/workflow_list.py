from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from workflow_center.schemas.project import Role
from workflow_center.schemas.workflow import Workflow

EMPTY_STATE_MESSAGE = "No workflows found. Create your first workflow!"


def is_admin(role: Optional[Role]) -> bool:
    return role is Role.ADMIN


@dataclass
class CardAction:
    name: str
    label: str
    method: str = "post"
    confirm: Optional[str] = None
    danger: bool = False
    value: Optional[str] = None


@dataclass
class WorkflowCard:
    workflow: Workflow
    badges: List[str]
    actions: List[CardAction] = field(default_factory=list)

    def action_names(self) -> List[str]:
        return [action.name for action in self.actions]


def build_card(workflow: Workflow, role: Optional[Role]) -> WorkflowCard:
    badges = [workflow.source, workflow.template_name]
    if workflow.is_shared:
        badges.append("Shared")

    actions = [CardAction(name="execute", label="Execute", method="get")]
    if is_admin(role):
        share_verb = "unshare" if workflow.is_shared else "share"
        actions.extend(
            [
                CardAction(name="edit", label="Edit", method="get"),
                CardAction(
                    name="share",
                    label=share_verb.capitalize(),
                    confirm=f"Are you sure you want to {share_verb} this workflow?",
                    value="false" if workflow.is_shared else "true",
                ),
                CardAction(
                    name="hide",
                    label="Hide",
                    confirm=f'Are you sure you want to hide "{workflow.workflow_name}"?',
                ),
                CardAction(
                    name="delete",
                    label="Delete",
                    confirm=f'Are you sure you want to delete "{workflow.workflow_name}"?',
                    danger=True,
                ),
            ]
        )
    return WorkflowCard(workflow=workflow, badges=badges, actions=actions)


@dataclass
class WorkflowListView:
    cards: List[WorkflowCard]
    can_create: bool

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def empty_message(self) -> Optional[str]:
        return EMPTY_STATE_MESSAGE if self.is_empty else None


def build_list(workflows: List[Workflow], role: Optional[Role]) -> WorkflowListView:
    return WorkflowListView(
        cards=[build_card(workflow, role) for workflow in workflows],
        can_create=is_admin(role),
    )
