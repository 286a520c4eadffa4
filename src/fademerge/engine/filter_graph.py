"""Filter graph and command line construction for the three-segment merge."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..config import AppConfig, FilterMode


@dataclass(slots=True, frozen=True)
class FilterGraphSpec:
    """Fixed fade/loudness policy; values come from configuration."""

    mode: FilterMode = FilterMode.LOUDNORM
    fade_in_seconds: float = 2.0
    fade_out_seconds: float = 2.0
    loudness_target_i: float = -16.0
    loudness_true_peak: float = -1.5
    loudness_range: float = 11.0
    audio_codec: str = "libmp3lame"
    audio_bitrate: str = "192k"
    sample_rate: int = 44100

    @classmethod
    def from_config(cls, config: AppConfig) -> "FilterGraphSpec":
        return cls(
            mode=config.filter_mode,
            fade_in_seconds=config.fade_in_seconds,
            fade_out_seconds=config.fade_out_seconds,
            loudness_target_i=config.loudness_target_i,
            loudness_true_peak=config.loudness_true_peak,
            loudness_range=config.loudness_range,
            audio_codec=config.audio_codec,
            audio_bitrate=config.audio_bitrate,
            sample_rate=config.sample_rate,
        )

    def build(self, outro_duration: float) -> str:
        """Return the ``-filter_complex`` graph.

        Inputs are referenced positionally: ``0`` intro, ``1`` main, ``2`` outro.
        """
        conform = f"aformat=sample_fmts=fltp:sample_rates={self.sample_rate}:channel_layouts=stereo"
        fade_out_start = max(0.0, outro_duration - self.fade_out_seconds)
        chains = [
            f"[0:a]{conform},afade=t=in:st=0:d={_num(self.fade_in_seconds)}[intro]",
            f"[1:a]{conform}[main]",
            (
                f"[2:a]{conform},afade=t=out:st={_num(fade_out_start)}"
                f":d={_num(self.fade_out_seconds)}[outro]"
            ),
        ]
        if self.mode is FilterMode.LOUDNORM:
            chains.append("[intro][main][outro]concat=n=3:v=0:a=1[cat]")
            chains.append(
                f"[cat]loudnorm=I={_num(self.loudness_target_i)}"
                f":TP={_num(self.loudness_true_peak)}:LRA={_num(self.loudness_range)}[out]"
            )
        else:
            chains.append("[intro][main][outro]concat=n=3:v=0:a=1[out]")
        return ";".join(chains)

    def command(
        self,
        intro: Path,
        main: Path,
        outro: Path,
        output: Path,
        *,
        outro_duration: float,
    ) -> list[str]:
        """Build the ffmpeg argument list (without the executable)."""
        return [
            "-hide_banner",
            "-nostdin",
            "-y",
            "-i",
            str(intro),
            "-i",
            str(main),
            "-i",
            str(outro),
            "-filter_complex",
            self.build(outro_duration),
            "-map",
            "[out]",
            "-ar",
            str(self.sample_rate),
            "-c:a",
            self.audio_codec,
            "-b:a",
            self.audio_bitrate,
            str(output),
        ]


def probe_duration_args(path: Path) -> list[str]:
    """ffprobe arguments printing the container duration in seconds."""
    return [
        "-v",
        "error",
        "-show_entries",
        "format=duration",
        "-of",
        "default=noprint_wrappers=1:nokey=1",
        str(path),
    ]


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text
