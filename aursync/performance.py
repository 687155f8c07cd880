"""Timing of per-package sync and build operations."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Generator, List, Optional

# Operations slower than this are logged as warnings
SLOW_OPERATION_SECONDS = 30.0


@dataclass
class PerformanceMetrics:
    """Timing of a single operation."""
    operation: str
    duration: float
    start_time: float
    end_time: float
    success: bool = True


class PerformanceLogger:
    """
    Collects durations of clone, refresh and build steps.

    One instance lives for one sync run; the summary is logged at the end.
    """

    def __init__(self, logger_name: str = 'aursync.performance'):
        self.logger = logging.getLogger(logger_name)
        self._metrics: List[PerformanceMetrics] = []

    @contextmanager
    def time_operation(self, operation: str, log_level: int = logging.DEBUG) -> Generator[None, None, None]:
        """
        Context manager for timing operations.

        Args:
            operation: Name of the operation being timed
            log_level: Logging level for the completion message
        """
        start_time = time.time()
        self.logger.log(log_level, f"⏱️ Starting {operation}")

        success = True
        try:
            yield
        except Exception:
            success = False
            raise
        finally:
            end_time = time.time()
            duration = end_time - start_time
            self._metrics.append(PerformanceMetrics(
                operation=operation,
                duration=duration,
                start_time=start_time,
                end_time=end_time,
                success=success
            ))

            if not success:
                self.logger.debug(f"❌ {operation} failed after {duration:.3f}s")
            elif duration > SLOW_OPERATION_SECONDS:
                self.logger.warning(f"⚠️ Slow operation: {operation} took {duration:.3f}s")
            else:
                self.logger.log(log_level, f"✅ {operation} completed in {duration:.3f}s")

    @property
    def metrics(self) -> List[PerformanceMetrics]:
        return list(self._metrics)

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        Get a summary of performance metrics.

        Returns:
            Dictionary containing performance summary
        """
        if not self._metrics:
            return {"total_operations": 0, "average_duration": 0.0}

        total_operations = len(self._metrics)
        total_duration = sum(m.duration for m in self._metrics)
        successful_ops = sum(1 for m in self._metrics if m.success)
        slowest_op = max(self._metrics, key=lambda m: m.duration)

        return {
            "total_operations": total_operations,
            "total_duration": total_duration,
            "average_duration": total_duration / total_operations,
            "success_rate": successful_ops / total_operations,
            "slowest_operation": {
                "name": slowest_op.operation,
                "duration": slowest_op.duration
            }
        }

    def log_performance_summary(self) -> Optional[Dict[str, Any]]:
        """Log a summary of all performance metrics."""
        summary = self.get_performance_summary()

        if summary["total_operations"] == 0:
            self.logger.debug("📊 No performance metrics available")
            return None

        self.logger.info(
            f"📊 Performance Summary: {summary['total_operations']} operations in "
            f"{summary['total_duration']:.1f}s, {summary['success_rate']:.1%} success rate"
        )
        slowest = summary["slowest_operation"]
        self.logger.debug(f"🐌 Slowest operation: {slowest['name']} ({slowest['duration']:.3f}s)")
        return summary
