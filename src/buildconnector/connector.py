"""
Build tool connector facade.

Exposes the build, test and deploy entry points on top of one JobDispatcher.
The three differ only in the event kind their jobs report under.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .events import EventSink
from .models.config import ConnectorConfig
from .models.job import EventKind, Job, JobId
from .orchestration import JobDispatcher
from .system.commands import resolve_executable

logger = logging.getLogger(__name__)


class AliveState(Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class BuildToolConnector:
    """
    Runs the configured build tool command for build, test and deploy requests.

    Each entry point returns the job id. Without ``process_id`` a random id
    is generated; with it, the events carry the caller's numeric process id.
    """

    def __init__(self, config: ConnectorConfig, event_sink: EventSink,
                 executable: Optional[str] = None):
        self.config = config
        self.dispatcher = JobDispatcher(
            config,
            event_sink,
            executable=executable or resolve_executable(config.executable),
        )

    @property
    def alive_state(self) -> AliveState:
        return AliveState.ONLINE if self.dispatcher.is_started else AliveState.OFFLINE

    def start(self) -> None:
        self.dispatcher.start()

    def shutdown(self, wait: bool = True) -> None:
        self.dispatcher.shutdown(wait=wait)

    def build(self, project_dir: Union[str, Path], process_id: Optional[int] = None,
              command: Optional[str] = None) -> JobId:
        return self._submit(EventKind.BUILD, project_dir, process_id, command)

    def run_tests(self, project_dir: Union[str, Path], process_id: Optional[int] = None,
                  command: Optional[str] = None) -> JobId:
        return self._submit(EventKind.TEST, project_dir, process_id, command)

    def deploy(self, project_dir: Union[str, Path], process_id: Optional[int] = None,
               command: Optional[str] = None) -> JobId:
        return self._submit(EventKind.DEPLOY, project_dir, process_id, command)

    def _submit(self, kind: EventKind, project_dir: Union[str, Path],
                process_id: Optional[int], command: Optional[str]) -> JobId:
        job = Job.create(
            command=command or self.config.command,
            working_directory=project_dir,
            event_kind=kind,
            job_id=process_id,
        )
        return self.dispatcher.execute(job)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown(wait=True)
