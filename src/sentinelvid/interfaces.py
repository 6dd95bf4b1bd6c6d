"""Interface definitions for the remote collaborators of the pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sentinelvid.models.analysis import RawModelResponse
    from sentinelvid.models.asset import RemoteAssetHandle, TransportPayload, VideoAsset


class Shutdownable(ABC):
    """Async shutdown interface for managed components."""

    @abstractmethod
    async def shutdown(self, timeout: float | None = None) -> None:
        """Release resources and stop background work."""
        raise NotImplementedError


class CredentialProvider(ABC):
    """Yields the secret used to authenticate against the inference endpoint."""

    @abstractmethod
    def get_credential(self) -> str | None:
        """Return the credential, or None when none is available.

        Absence is terminal for an invocation: the pipeline never retries or
        prompts on its own.
        """
        raise NotImplementedError


class AssetUploader(Shutdownable, ABC):
    """Stages video assets on a remote file service."""

    @abstractmethod
    async def upload(self, asset: VideoAsset, credential: str) -> RemoteAssetHandle:
        """Upload the asset and return a handle to the remote file."""
        raise NotImplementedError

    @abstractmethod
    async def get_status(self, handle: RemoteAssetHandle, credential: str) -> RemoteAssetHandle:
        """Fetch the current lifecycle state of a previously uploaded file."""
        raise NotImplementedError


class InferenceClient(Shutdownable, ABC):
    """Invokes the multimodal model on a transport payload."""

    @abstractmethod
    async def invoke(self, payload: TransportPayload, credential: str) -> RawModelResponse:
        """Run security analysis on the payload and return the raw model output.

        Raises MissingCredentialError before any network call if the credential
        is empty.
        """
        raise NotImplementedError
