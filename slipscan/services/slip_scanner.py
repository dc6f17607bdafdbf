"""Two-pass slip scanning over a batch of images.

Each slip is read in up to two OCR passes:

* PRIMARY reads only the bottom band of the prepared image, where banking
  apps print the amount and memo.
* FALLBACK reads the whole prepared image, and only runs when PRIMARY left
  the amount or the memo empty. It fills the missing fields and never
  replaces a field PRIMARY already found.

There is no pass after FALLBACK. Files are processed one at a time; a file
that fails is recorded as a failed result and the batch carries on.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Any

from flask import current_app
from PIL import Image

from .image_preprocessing import (
    DEFAULT_BOTTOM_RATIO,
    DEFAULT_MAX_WIDTH,
    DEFAULT_MIN_CROP_HEIGHT,
    crop_bottom,
    load_image,
    prepare_slip_image,
)
from .ocr_service import RECOGNIZING_STATUS, OCREngine, OCRProgress, get_ocr_engine
from .slip_parser import SlipData, parse_slip_text

logger = logging.getLogger(__name__)

EMPTY_FIELD = "-"
FAILED_MEMO = "อ่านไม่สำเร็จ"


class ScanPass(Enum):
    """States of the per-slip scan."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    DONE = "done"


# (start, width) of each pass inside one file's share of the progress bar
PASS_PROGRESS_WINDOWS: dict[ScanPass, tuple[float, float]] = {
    ScanPass.PRIMARY: (0.04, 0.78),
    ScanPass.FALLBACK: (0.84, 0.14),
}

PASS_MESSAGES: dict[ScanPass, str] = {
    ScanPass.PRIMARY: "กำลังอ่านสลิป {number}/{total}: {filename}",
    ScanPass.FALLBACK: "กำลังเก็บข้อมูลเพิ่ม {number}/{total}: {filename}",
}


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def pass_progress(scan_pass: ScanPass, fraction: float) -> float:
    """Map OCR progress (0-1) within a pass onto the file's progress (0-1)."""
    start, width = PASS_PROGRESS_WINDOWS.get(scan_pass, (1.0, 0.0))
    return start + clamp(fraction, 0.0, 1.0) * width


def file_progress(file_index: int, total_files: int, local_fraction: float) -> int:
    """Map a file's progress onto the batch percentage.

    Computes ``(file_index + local_fraction) / total_files`` as a whole
    percentage, rounding halves up.
    """
    each = 100 / max(1, total_files)
    return _round_half_up(file_index * each + clamp(local_fraction, 0.0, 1.0) * each)


@dataclass(frozen=True)
class ScanSettings:
    """Image geometry used for the two passes."""

    max_width: int = DEFAULT_MAX_WIDTH
    bottom_ratio: float = DEFAULT_BOTTOM_RATIO
    min_crop_height: int = DEFAULT_MIN_CROP_HEIGHT

    @classmethod
    def from_config(cls, config: Any) -> "ScanSettings":
        return cls(
            max_width=int(config.get("IMAGE_MAX_WIDTH", DEFAULT_MAX_WIDTH)),
            bottom_ratio=float(config.get("OCR_PRIMARY_BOTTOM_RATIO", DEFAULT_BOTTOM_RATIO)),
            min_crop_height=int(config.get("OCR_PRIMARY_MIN_HEIGHT", DEFAULT_MIN_CROP_HEIGHT)),
        )


@dataclass(frozen=True)
class SlipUpload:
    """One image to scan."""

    filename: str
    data: bytes


@dataclass(frozen=True)
class ProgressEvent:
    """Batch progress reported to observers."""

    message: str
    percent: int


ProgressCallback = Callable[[ProgressEvent], None]
PassProgressCallback = Callable[[ScanPass, float], None]


@dataclass
class ScanResult:
    """Outcome for one slip of a batch."""

    order: int
    filename: str
    amount: str = ""
    memo: str = ""
    error: str | None = None
    passes: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_row(self) -> tuple[int, str, str]:
        """Row as shown to users: placeholders for missing or failed fields."""
        if self.failed:
            return self.order, EMPTY_FIELD, FAILED_MEMO
        return self.order, self.amount or EMPTY_FIELD, self.memo or EMPTY_FIELD


class SlipScanner:
    """Runs the two-pass extraction for single slips and batches."""

    def __init__(self, engine: OCREngine, settings: ScanSettings | None = None) -> None:
        self.engine = engine
        self.settings = settings or ScanSettings()

    @staticmethod
    def next_pass(current: ScanPass, slip_data: SlipData) -> ScanPass:
        """Transition after a pass: FALLBACK only when PRIMARY left a field empty."""
        if current is ScanPass.PRIMARY and not slip_data.is_complete:
            return ScanPass.FALLBACK
        return ScanPass.DONE

    def scan_image(
        self,
        image: Image.Image,
        on_pass_progress: PassProgressCallback | None = None,
        passes_run: list[str] | None = None,
    ) -> SlipData:
        """Extract amount and memo from a decoded slip image.

        Args:
            image: Decoded slip image
            on_pass_progress: Optional observer receiving (pass, clamped OCR fraction)
            passes_run: Optional list that receives the name of each pass run

        Raises:
            OCRError: If a recognition pass fails
        """
        processed = prepare_slip_image(image, self.settings.max_width)
        primary_region = crop_bottom(processed, self.settings.bottom_ratio, self.settings.min_crop_height)
        regions = {
            ScanPass.PRIMARY: primary_region or processed,
            ScanPass.FALLBACK: processed,
        }

        slip_data = SlipData()
        state = ScanPass.PRIMARY
        while state is not ScanPass.DONE:
            text = self.engine.recognize(regions[state], self._engine_observer(state, on_pass_progress))
            slip_data.merge_missing(parse_slip_text(text))
            if passes_run is not None:
                passes_run.append(state.value)
            logger.debug(f"After {state.value} pass: amount='{slip_data.amount}' memo='{slip_data.memo}'")
            state = self.next_pass(state, slip_data)

        return slip_data

    @staticmethod
    def _engine_observer(
        state: ScanPass, on_pass_progress: PassProgressCallback | None
    ) -> Callable[[OCRProgress], None] | None:
        if on_pass_progress is None:
            return None

        def observe(event: OCRProgress) -> None:
            if not isinstance(event, OCRProgress) or event.status != RECOGNIZING_STATUS:
                return
            if isinstance(event.progress, bool) or not isinstance(event.progress, (int, float)):
                return
            if math.isnan(event.progress):
                return
            on_pass_progress(state, clamp(float(event.progress), 0.0, 1.0))

        return observe

    def scan_file(
        self,
        upload: SlipUpload,
        file_index: int = 0,
        total_files: int = 1,
        on_progress: ProgressCallback | None = None,
        passes_run: list[str] | None = None,
    ) -> SlipData:
        """Decode and scan one uploaded slip, reporting batch-level progress.

        Raises:
            SlipImageError: If the upload is not a decodable image
            OCRError: If a recognition pass fails
        """
        image = load_image(upload.data)

        def report(scan_pass: ScanPass, fraction: float) -> None:
            if on_progress is None:
                return
            message = PASS_MESSAGES[scan_pass].format(
                number=file_index + 1, total=total_files, filename=upload.filename
            )
            on_progress(ProgressEvent(message, file_progress(file_index, total_files, pass_progress(scan_pass, fraction))))

        return self.scan_image(image, report, passes_run)

    def scan_batch(
        self,
        uploads: Iterable[SlipUpload],
        on_progress: ProgressCallback | None = None,
        start_order: int = 1,
    ) -> list[ScanResult]:
        """Scan slips strictly one after another.

        Returns one result per upload, in input order. A slip that cannot be
        read yields a failed result instead of aborting the batch.
        """
        batch = list(uploads)
        total = len(batch)
        results: list[ScanResult] = []

        for index, upload in enumerate(batch):
            result = ScanResult(order=start_order + index, filename=upload.filename)
            try:
                slip_data = self.scan_file(upload, index, total, on_progress, result.passes)
                result.amount = slip_data.amount
                result.memo = slip_data.memo
            except Exception as e:
                logger.exception(f"Failed to read slip {upload.filename}: {e}")
                result.error = str(e) or e.__class__.__name__
            results.append(result)

            if on_progress:
                on_progress(ProgressEvent(f"อ่านแล้ว {index + 1}/{total} สลิป", _round_half_up((index + 1) / total * 100)))

        if on_progress and total:
            on_progress(ProgressEvent(f"อ่านครบ {total} สลิปแล้ว", 100))

        failed = sum(1 for result in results if result.failed)
        logger.info(f"Scanned {total} slips ({failed} failed)")
        return results


def get_slip_scanner() -> SlipScanner | None:
    """Get a slip scanner configured from the current application.

    Returns:
        SlipScanner instance or None if OCR is unavailable
    """
    engine = get_ocr_engine()
    if engine is None:
        return None
    return SlipScanner(engine, ScanSettings.from_config(current_app.config))
