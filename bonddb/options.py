"""Database options and the storage tuning presets for each performance profile."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import timedelta
from enum import IntEnum
from typing import Any, Callable, List, Optional, Tuple

from bonddb.keys import key_prefix_split
from bonddb.serializers.cbor_serializer import CBORSerializer

try:
    import resource
except ImportError:  # not available on every platform
    resource = None  # type: ignore[assignment]

DEFAULT_MAX_CONCURRENT_COMPACTIONS = 8

# Fallback when the system limit for open files cannot be read.
DEFAULT_MAX_OPEN_FILES = 5000
_MAX_OPEN_FILES_CAP = 10_000
_MIN_REASONABLE_OPEN_FILES = 1024

COMPRESSION_SNAPPY = "snappy"
COMPRESSION_ZSTD = "zstd"

_NUM_LEVELS = 7

_log = logging.getLogger(__name__)


class PerformanceProfile(IntEnum):
    """Intensity of the expected workload; medium is the default."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    def __str__(self) -> str:
        return self.name.lower()


@dataclass
class LevelOptions:
    """Table layout settings for one level of the storage tree."""

    block_size: int = 32 << 10
    index_block_size: int = 256 << 10
    bloom_bits_per_key: int = 10
    compression: str = COMPRESSION_SNAPPY


@dataclass
class StorageOptions:
    """Tuning of the underlying key/value store."""

    cache_size: int
    l0_compaction_file_threshold: int
    l0_compaction_threshold: int
    l0_stop_writes_threshold: int
    lbase_max_bytes: int
    max_open_files: int
    mem_table_size: int
    mem_table_stop_writes_threshold: int
    bytes_per_sync: int
    wal_min_sync_interval: timedelta
    target_byte_deletion_rate: int
    l0_compaction_concurrency: int
    l0_target_file_size: int
    levels: List[LevelOptions]
    compaction_debt_concurrency: int = 1 << 30
    flush_delay_delete_range: timedelta = timedelta(seconds=10)
    flush_delay_range_key: timedelta = timedelta(seconds=10)
    compaction_concurrency_range: Tuple[int, int] = field(
        default_factory=lambda: (
            1,
            max(DEFAULT_MAX_CONCURRENT_COMPACTIONS, os.cpu_count() or 1),
        )
    )
    max_concurrent_downloads: int = 2
    enable_value_blocks: bool = True
    value_separation_enabled: bool = True
    value_separation_minimum_size: int = 64
    max_blob_reference_depth: int = 10
    blob_rewrite_minimum_age: timedelta = timedelta(seconds=60)
    blob_target_garbage_ratio: float = 0.20
    read_sampling_multiplier: int = -1
    multi_level_compaction: bool = False
    prefer_fast_compression: bool = True
    disable_value_separation_by_suffix: bool = True
    low_read_latency_value_storage: bool = True
    key_split: Callable[[bytes], int] = key_prefix_split


@dataclass
class Options:
    """Options for opening a database."""

    storage_options: StorageOptions
    serializer: Any = field(default_factory=CBORSerializer)


def _levels(l0_block_size: int) -> List[LevelOptions]:
    levels = [LevelOptions(block_size=l0_block_size, compression=COMPRESSION_SNAPPY),
              LevelOptions(compression=COMPRESSION_SNAPPY)]
    levels += [LevelOptions(compression=COMPRESSION_ZSTD) for _ in range(_NUM_LEVELS - 2)]
    return levels


def low_performance_storage_options() -> StorageOptions:
    return StorageOptions(
        cache_size=128 << 20,
        l0_compaction_file_threshold=500,
        l0_compaction_threshold=4,
        l0_stop_writes_threshold=500,
        lbase_max_bytes=64 << 20,
        max_open_files=min(get_max_open_file_limit(), 2048),
        mem_table_size=64 << 20,
        mem_table_stop_writes_threshold=2,
        bytes_per_sync=1024 << 10,
        wal_min_sync_interval=timedelta(milliseconds=200),
        target_byte_deletion_rate=64 << 20,
        l0_compaction_concurrency=2,
        l0_target_file_size=2 << 20,
        levels=_levels(32 << 10),
    )


def medium_performance_storage_options() -> StorageOptions:
    return StorageOptions(
        cache_size=256 << 20,
        l0_compaction_file_threshold=500,
        l0_compaction_threshold=4,
        l0_stop_writes_threshold=1000,
        lbase_max_bytes=256 << 20,
        max_open_files=min(get_max_open_file_limit(), DEFAULT_MAX_OPEN_FILES),
        mem_table_size=128 << 20,
        mem_table_stop_writes_threshold=4,
        bytes_per_sync=4096 << 10,
        wal_min_sync_interval=timedelta(milliseconds=200),
        target_byte_deletion_rate=128 << 20,
        l0_compaction_concurrency=2,
        l0_target_file_size=2 << 20,
        levels=_levels(32 << 10),
    )


def high_performance_storage_options() -> StorageOptions:
    return StorageOptions(
        cache_size=1024 << 20,
        l0_compaction_file_threshold=1000,
        l0_compaction_threshold=8,
        l0_stop_writes_threshold=2000,
        lbase_max_bytes=1024 << 20,
        max_open_files=get_max_open_file_limit(),
        mem_table_size=256 << 20,
        mem_table_stop_writes_threshold=8,
        bytes_per_sync=4096 << 10,
        wal_min_sync_interval=timedelta(milliseconds=150),
        target_byte_deletion_rate=256 << 20,
        l0_compaction_concurrency=4,
        l0_target_file_size=4 << 20,
        levels=_levels(64 << 10),
    )


_PRESETS = {
    PerformanceProfile.LOW: low_performance_storage_options,
    PerformanceProfile.MEDIUM: medium_performance_storage_options,
    PerformanceProfile.HIGH: high_performance_storage_options,
}


def default_storage_options(
    performance_profile: Optional[PerformanceProfile] = None,
) -> StorageOptions:
    """Storage options for the profile; medium when none or an unknown one is given."""
    preset = _PRESETS.get(performance_profile, medium_performance_storage_options)  # type: ignore[arg-type]
    return preset()


def default_options(performance_profile: Optional[PerformanceProfile] = None) -> Options:
    """Database options with CBOR serialization and the profile's storage options."""
    return Options(
        storage_options=default_storage_options(performance_profile),
        serializer=CBORSerializer(),
    )


def to_performance_profile(name: str) -> PerformanceProfile:
    """Parse ``low``, ``medium`` or ``high`` (any case); anything else is medium."""
    return {
        "low": PerformanceProfile.LOW,
        "medium": PerformanceProfile.MEDIUM,
        "high": PerformanceProfile.HIGH,
    }.get(name.lower(), PerformanceProfile.MEDIUM)


def get_max_open_file_limit(log: Optional[logging.Logger] = None) -> int:
    """85% of the soft limit on open files, capped at 10,000 and at least 1024.

    Falls back to 5000 when the limit cannot be determined.
    """
    log = log or _log
    try:
        if resource is None:
            raise OSError("resource limits are not available on this platform")
        soft, _hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (OSError, ValueError) as exc:
        log.warning(
            "Failed to get RLIMIT_NOFILE: %s. Falling back to default %d",
            exc, DEFAULT_MAX_OPEN_FILES,
        )
        return DEFAULT_MAX_OPEN_FILES

    if soft < 0 or soft == resource.RLIM_INFINITY:
        limit = _MAX_OPEN_FILES_CAP
    else:
        limit = min(int(soft * 0.85), _MAX_OPEN_FILES_CAP)

    if limit < _MIN_REASONABLE_OPEN_FILES:
        log.warning(
            "Calculated file descriptor limit (%d) is below minimum reasonable %d. Using %d.",
            limit, _MIN_REASONABLE_OPEN_FILES, _MIN_REASONABLE_OPEN_FILES,
        )
        return _MIN_REASONABLE_OPEN_FILES

    log.debug("System RLIMIT_NOFILE is %d. Using %d for MaxOpenFiles.", soft, limit)
    return limit