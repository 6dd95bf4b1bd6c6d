"""CLI entrypoint for Sentinelvid."""

from __future__ import annotations

import asyncio
import json as jsonlib
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import fire  # type: ignore[import-untyped]

from sentinelvid.config import ConfigError, load_config, load_config_from_dict
from sentinelvid.credentials import (
    ChainedCredentialProvider,
    EnvCredentialProvider,
    StaticCredentialProvider,
)
from sentinelvid.errors import AnalysisError, AuthError, PreconditionError
from sentinelvid.logging_setup import configure_logging
from sentinelvid.models.analysis import AnalysisResult
from sentinelvid.models.asset import VideoAsset
from sentinelvid.models.config import Config
from sentinelvid.models.enums import AnalysisPhase
from sentinelvid.pipeline import AnalysisPipeline
from sentinelvid.timeline import build_timeline
from sentinelvid.transport.strategy import format_size

EXIT_ERROR = 1
EXIT_AUTH = 3

_PHASE_MESSAGES = {
    AnalysisPhase.UPLOADING: "Uploading footage (this may take a moment for large files)...",
    AnalysisPhase.ANALYZING: "Analyzing footage: detecting entities, behaviors, and anomalies...",
}


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for CLI."""
    configure_logging(log_level=level)


def _load(config: str | None) -> Config:
    if config is None:
        return load_config_from_dict({})
    return load_config(Path(config))


def _print_report(result: AnalysisResult) -> None:
    meta = result.video_meta
    print(f"Duration: {meta.duration}  Lighting: {meta.lighting}")
    print(f"Summary: {result.summary}")
    entries = build_timeline(result)
    print(f"Events: {len(entries)} detected")
    if not entries:
        print("  No significant security events detected.")
    for entry in entries:
        event = entry.event
        print(
            f"  [{event.timestamp}] {entry.label} (sev {event.severity}, "
            f"{event.confidence:.0%}) {event.classification}: {event.description}"
        )


class Sentinelvid:
    """Sentinelvid CLI - security event timelines from video footage."""

    def analyze(
        self,
        video: str,
        config: str | None = None,
        api_key: str | None = None,
        mime_type: str | None = None,
        json: bool = False,
        log_level: str = "WARNING",
    ) -> None:
        """Analyze a video file and print its security event timeline.

        Args:
            video: Path to the video file
            config: Optional path to YAML config file
            api_key: Gemini API key (default: read from the configured env var)
            mime_type: Override the media type guessed from the file extension
            json: Print the raw AnalysisResult JSON instead of the timeline
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        setup_logging(log_level)

        try:
            cfg = _load(config)
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(EXIT_ERROR)

        video_path = Path(video)
        if not video_path.is_file():
            print(f"✗ Video not found: {video_path}", file=sys.stderr)
            sys.exit(EXIT_ERROR)

        provider = ChainedCredentialProvider(
            [StaticCredentialProvider(api_key), EnvCredentialProvider(cfg.gemini.api_key_env)]
        )
        asset = VideoAsset.from_path(video_path, mime_type=mime_type)
        outcome = asyncio.run(self._run(cfg, asset, provider.get_credential()))

        match outcome:
            case AuthError() as err:
                print(f"✗ API key rejected: {err}", file=sys.stderr)
                print(
                    f"  Provide a valid key with --api_key or {cfg.gemini.api_key_env}.",
                    file=sys.stderr,
                )
                sys.exit(EXIT_AUTH)
            case PreconditionError() as err:
                print(f"✗ {err}", file=sys.stderr)
                sys.exit(EXIT_ERROR)
            case AnalysisError() as err:
                print(f"✗ Analysis failed ({err.stage}): {err}", file=sys.stderr)
                sys.exit(EXIT_ERROR)
            case AnalysisResult() as result:
                if json:
                    print(jsonlib.dumps(result.model_dump(), indent=2))
                else:
                    _print_report(result)

    @staticmethod
    async def _run(
        cfg: Config, asset: VideoAsset, credential: str | None
    ) -> AnalysisResult | AnalysisError:
        pipeline = AnalysisPipeline.from_config(cfg)

        def on_progress(phase: AnalysisPhase) -> None:
            print(_PHASE_MESSAGES.get(phase, str(phase)), file=sys.stderr)

        try:
            return await pipeline.run_analysis(asset, credential, on_progress)
        finally:
            await pipeline.shutdown()

    def validate(self, config: str) -> None:
        """Validate config file without running.

        Args:
            config: Path to YAML config file
        """
        config_path = Path(config)
        try:
            cfg = load_config(config_path)
        except ConfigError as e:
            print(f"✗ Config invalid: {e}", file=sys.stderr)
            sys.exit(EXIT_ERROR)

        transport = cfg.transport
        print(f"✓ Config valid: {config_path}")
        print(f"  Model: {cfg.gemini.model} (temperature={cfg.gemini.temperature})")
        print(f"  API key env: {cfg.gemini.api_key_env}")
        print(f"  Inline below: {format_size(transport.inline_threshold_bytes)}")
        print(f"  Fallback embedding below: {format_size(transport.fallback_ceiling_bytes)}")
        print(f"  Maximum file size: {format_size(transport.max_file_bytes)}")
        print(
            f"  Polling: every {cfg.polling.interval_s}s, at most "
            f"{cfg.polling.max_attempts} checks / {cfg.polling.timeout_s}s"
        )


def main() -> None:
    """Main CLI entrypoint."""
    fire.Fire(Sentinelvid)


if __name__ == "__main__":
    main()
