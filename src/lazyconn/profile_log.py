"""Bookkeeping for profiled statement executions.

Statements are grouped by a fingerprint of their SQL text (an MD5 digest).
Two different texts with the same digest are counted as the same statement.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from lazyconn import utils


def _freeze(params):
    if params is None:
        return None
    if isinstance(params, Mapping):
        return MappingProxyType(dict(params))
    return tuple(params)


def _thaw(params):
    if isinstance(params, Mapping):
        return dict(params)
    if isinstance(params, tuple):
        return list(params)
    return params


@dataclass(frozen=True)
class ExecutionRecord:
    sql: str
    iteration: int
    duration: float
    params: Any = None


@dataclass(frozen=True)
class RerunAggregate:
    sql: str
    iteration: int
    duration: float


@dataclass(frozen=True)
class LogSnapshot:
    records: tuple[ExecutionRecord, ...]
    aggregates: Mapping[str, RerunAggregate]
    total_count: int
    total_duration: float

    def as_dict(self) -> dict:
        return {
            'records': [
                {'sql': r.sql, 'iteration': r.iteration, 'duration': r.duration, 'params': _thaw(r.params)}
                for r in self.records
            ],
            'aggregates': {
                key: {'sql': a.sql, 'iteration': a.iteration, 'duration': a.duration}
                for key, a in self.aggregates.items()
            },
            'total_count': self.total_count,
            'total_duration': self.total_duration,
        }


@dataclass
class ProfilingLog:
    records: list[ExecutionRecord] = field(default_factory=list)
    aggregates: dict[str, RerunAggregate] = field(default_factory=dict)
    total_count: int = 0
    total_duration: float = 0.0

    def add(self, sql: str, duration: float, params=None) -> ExecutionRecord:
        key = utils.fingerprint(sql)
        previous = self.aggregates.get(key)
        iteration = previous.iteration + 1 if previous else 1
        cumulative = previous.duration + duration if previous else duration

        record = ExecutionRecord(sql, iteration, duration, _freeze(params))
        self.records.append(record)
        self.aggregates[key] = RerunAggregate(sql, iteration, cumulative)
        self.total_count += 1
        self.total_duration += duration
        return record

    def snapshot(self) -> LogSnapshot:
        return LogSnapshot(
            records=tuple(self.records),
            aggregates=MappingProxyType(dict(self.aggregates)),
            total_count=self.total_count,
            total_duration=self.total_duration,
        )
