from __future__ import annotations

from dataclasses import dataclass, field

from ..services import ResourceService, ServiceContext


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    resources: ResourceService = field(init=False)

    def __post_init__(self) -> None:
        self.resources = ResourceService(self.context)


api_state = ApiState()
