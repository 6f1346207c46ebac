"""Workflow payload models sent to the n8n API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkflowNode(BaseModel):
    """A single node placed on the workflow canvas."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str
    # n8n expects canvas coordinates as [x, y]
    position: list[float] = Field(min_length=2, max_length=2)
    parameters: dict[str, Any] | None = None
    type_version: float | None = Field(default=None, alias='typeVersion')
    credentials: dict[str, Any] | None = None


class Connection(BaseModel):
    node: str
    type: str
    index: int


class WorkflowSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    save_execution_progress: bool | None = Field(default=None, alias='saveExecutionProgress')
    save_manual_executions: bool | None = Field(default=None, alias='saveManualExecutions')
    save_data_error_execution: str | None = Field(default=None, alias='saveDataErrorExecution')
    save_data_success_execution: str | None = Field(default=None, alias='saveDataSuccessExecution')
    execution_timeout: float | None = Field(default=None, alias='executionTimeout')
    error_workflow: str | None = Field(default=None, alias='errorWorkflow')
    timezone: str | None = None
    execution_order: str | None = Field(default=None, alias='executionOrder')


class Workflow(BaseModel):
    """
    Complete workflow definition.

    ``connections`` maps a source node name to its output types, each holding
    one list of targets per output index.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str
    active: bool | None = None
    nodes: list[WorkflowNode]
    connections: dict[str, dict[str, list[list[Connection]]]]
    settings: WorkflowSettings = Field(default_factory=WorkflowSettings)
    static_data: str | dict[str, Any] | None = Field(default=None, alias='staticData')

    def to_api(self) -> dict[str, Any]:
        """
        Serialize with n8n field names for create/update requests.

        Unset values and the read-only ``id`` and ``active`` fields are dropped.
        """
        return self.model_dump(by_alias=True, exclude_none=True, exclude={'id', 'active'})

    @property
    def node_types(self) -> list[str]:
        return [node.type for node in self.nodes]
