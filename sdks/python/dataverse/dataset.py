"""Dataset endpoints of the Dataverse native API."""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .conditions import LockCondition
from .exceptions import NetworkError, ValidationError
from .models import (
    DataMessage,
    DatasetVersion,
    Lock,
    PollOutcome,
    RetryPolicy,
    UpdateType,
)
from .polling import await_condition, await_state_tag
from .retry import retry_on_conflict

logger = logging.getLogger(__name__)

LATEST = ":latest"
DRAFT = ":draft"


class DatasetApi:
    """Operations on a single dataset.

    Most methods map onto exactly one API call. The ``await_*`` methods and
    ``publish(..., assure_indexed=True)`` poll or retry and block the calling
    thread until they are done.
    """

    def __init__(self, client, id_or_pid: Union[int, str], sleep: Optional[Callable[[float], None]] = None):
        """Initialize the dataset API.

        Args:
            client: DataverseClient used for the round-trips
            id_or_pid: Database id (int or digits) or persistent id (e.g. doi:10.5072/FK2/ABC)
            sleep: Blocking sleep used between polls, defaults to time.sleep
        """
        self.client = client
        self.id = id_or_pid
        self._sleep = sleep
        self._is_pid = not str(id_or_pid).isdigit()

    def __repr__(self) -> str:
        return f"DatasetApi(id={self.id!r})"

    def _path(self, endpoint: str = "") -> str:
        target = ":persistentId" if self._is_pid else str(self.id)
        path = f"/api/datasets/{target}"
        return f"{path}/{endpoint}" if endpoint else path

    def _params(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        merged = dict(params or {})
        if self._is_pid:
            merged["persistentId"] = self.id
        return merged

    def _lock_policy(self, max_attempts: Optional[int], interval_ms: Optional[int]) -> RetryPolicy:
        config = self.client.config
        return RetryPolicy(
            max_attempts if max_attempts is not None else config.await_lock_state_max_attempts,
            interval_ms if interval_ms is not None else config.await_lock_state_interval_ms,
        )

    # ---------- versions ----------

    def get_version(self, version: str = LATEST, exclude_files: bool = False) -> DatasetVersion:
        """Get one version of the dataset, the latest visible one by default."""
        if not version:
            raise ValidationError("Version must not be empty")
        body = self.client.request(
            "GET",
            self._path(f"versions/{version}"),
            params=self._params({"excludeFiles": str(exclude_files).lower()}),
        )
        try:
            return DatasetVersion.from_json(body["data"])
        except (KeyError, TypeError) as e:
            raise NetworkError(f"Malformed dataset version in response: {e!r}") from e

    def get_all_versions(self) -> List[DatasetVersion]:
        body = self.client.request("GET", self._path("versions"), params=self._params())
        return [DatasetVersion.from_json(v) for v in body.get("data", [])]

    def get_files(self, version: str = LATEST) -> List[Dict[str, Any]]:
        body = self.client.request("GET", self._path(f"versions/{version}/files"), params=self._params())
        return body.get("data", [])

    def get_state(self) -> str:
        """Return the state (e.g. DRAFT, RELEASED) of the latest version visible to the user."""
        return self.get_version(LATEST, exclude_files=True).version_state

    def delete_draft(self) -> DataMessage:
        body = self.client.request("DELETE", self._path(f"versions/{DRAFT}"), params=self._params())
        return DataMessage.from_json(body)

    def submit_for_review(self) -> DataMessage:
        body = self.client.request("POST", self._path("submitForReview"), params=self._params(), content="")
        return DataMessage.from_json(body)

    # ---------- publication ----------

    def _publish_once(self, update_type: UpdateType, assure_indexed: bool) -> DataMessage:
        body = self.client.request(
            "POST",
            self._path("actions/:publish"),
            params=self._params({
                "type": UpdateType(update_type).value,
                "assureIsIndexed": str(assure_indexed).lower(),
            }),
            content="",
        )
        return DataMessage.from_json(body)

    def publish(self, update_type: UpdateType = UpdateType.MAJOR, assure_indexed: bool = False) -> DataMessage:
        """Publish the current draft.

        With ``assure_indexed`` Dataverse answers 409 Conflict while indexing of
        an earlier change is pending. The publish is then retried according to
        the indexing settings of the client configuration. Any other failure is
        raised after the first attempt.

        Args:
            update_type: major, minor or updatecurrent
            assure_indexed: Refuse to publish while an index action is pending

        Returns:
            DataMessage with the publication result

        Raises:
            RetryBudgetExhaustedError: Indexing stayed pending for every attempt
            RemoteError: Dataverse refused the publication
            NetworkError: The request could not be completed
        """
        if not assure_indexed:
            return self._publish_once(update_type, False)
        return retry_on_conflict(
            lambda: self._publish_once(update_type, True),
            self.client.config.retry_policy_for_indexing(),
            sleep=self._sleep,
            description="publish dataset",
        )

    def release_migrated(self, publication_date_jsonld: str, assure_indexed: bool = False) -> DataMessage:
        """Publish an imported dataset with its original publication date.

        Like :meth:`publish`, ``assure_indexed`` retries while indexing is pending.
        """
        def release() -> DataMessage:
            body = self.client.request(
                "POST",
                self._path("actions/:releasemigrated"),
                params=self._params({"assureIsIndexed": str(assure_indexed).lower()}),
                headers={"Content-Type": "application/ld+json"},
                content=publication_date_jsonld,
            )
            return DataMessage.from_json(body)

        if not assure_indexed:
            return release()
        return retry_on_conflict(
            release,
            self.client.config.retry_policy_for_indexing(),
            sleep=self._sleep,
            description="release migrated dataset",
        )

    # ---------- locks ----------

    def get_locks(self) -> List[Lock]:
        """Get the locks currently on the dataset. Every call is a fresh round-trip."""
        body = self.client.request("GET", self._path("locks"), params=self._params())
        try:
            return [Lock.from_json(lock) for lock in body.get("data") or []]
        except (KeyError, TypeError) as e:
            raise NetworkError(f"Malformed lock record in response: {e!r}") from e

    def await_unlock(
        self,
        lock_types: Optional[Sequence[str]] = None,
        max_attempts: Optional[int] = None,
        interval_ms: Optional[int] = None,
    ) -> PollOutcome:
        """Wait until the dataset has no locks at all.

        ``lock_types`` names the locks the caller is waiting for and only ends
        up in the timeout message; any remaining lock keeps the wait going.
        The dataset may get locked again by another process right after this
        returns.
        """
        lock_types = list(lock_types or [])
        if lock_types:
            description = f"Wait for unlock of types {lock_types} on {self.id} expired"
        else:
            description = "Wait for unlock expired"
        return await_condition(
            self.get_locks,
            LockCondition.ALL_CLEAR,
            lock_types,
            self._lock_policy(max_attempts, interval_ms),
            sleep=self._sleep,
            description=description,
        )

    def await_lock(
        self,
        lock_type: str,
        max_attempts: Optional[int] = None,
        interval_ms: Optional[int] = None,
    ) -> PollOutcome:
        """Wait until a lock of ``lock_type`` is on the dataset.

        Used by workflows that need to know the dataset was locked on their behalf.
        """
        return await_condition(
            self.get_locks,
            LockCondition.ALL_PRESENT,
            [lock_type],
            self._lock_policy(max_attempts, interval_ms),
            sleep=self._sleep,
            description=f"Wait for lock of type {lock_type} expired",
        )

    # ---------- state ----------

    def await_state(self, target_state: str, timeout_ms: int, polling_interval_ms: int) -> None:
        """Wait until the latest version has ``target_state``, e.g. "RELEASED" after publishing.

        Raises:
            StateWaitTimeoutError: The state was not reached within ``timeout_ms``
        """
        await_state_tag(
            self.get_state,
            str(getattr(target_state, "value", target_state)),
            timeout_ms,
            polling_interval_ms,
            sleep=self._sleep,
        )
