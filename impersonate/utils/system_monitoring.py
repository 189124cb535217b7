"""
System Monitoring Module

Snapshots of the resources used by the current process, logged around
long-running operations such as training on a large log.
"""

import os
import time
from datetime import datetime

import psutil


class ResourceMonitor:
    """
    Tracks an operation and reports memory and CPU usage of the process.

    Args:
        logger: Logger instance for recording resource metrics
    """

    def __init__(self, logger):
        self.logger = logger
        self.process = psutil.Process(os.getpid())
        self.current_operation = None
        self.operation_start_time = None

    def get_resource_usage(self):
        """
        Get resource usage statistics of the current process.

        Returns:
            dict: Memory and CPU metrics
        """
        memory_info = self.process.memory_info()
        system_memory = psutil.virtual_memory()

        return {
            "timestamp": datetime.now().isoformat(),
            "memory": {
                "current_mb": memory_info.rss / (1024 * 1024),
                "system_percent_used": system_memory.percent,
            },
            "cpu": {
                "process_percent": self.process.cpu_percent(interval=None),
                "logical_cores": psutil.cpu_count(logical=True),
            },
            "process_id": self.process.pid,
        }

    def start(self, operation_name):
        """
        Start tracking an operation.

        Args:
            operation_name (str): Name of the operation being monitored
        """
        self.current_operation = operation_name
        self.operation_start_time = time.time()
        self.logger.debug(f"Resource monitoring started for operation: {operation_name}", extra={
            "metrics": self.get_resource_usage()
        })

    def log_progress(self, message, extra_metrics=None):
        """
        Log a message with current resource metrics.

        Args:
            message (str): Progress message to log
            extra_metrics (dict, optional): Additional metrics to include in the log
        """
        metrics = {"system_resources": self.get_resource_usage()}
        if extra_metrics:
            metrics.update(extra_metrics)

        if self.current_operation:
            metrics["operation"] = self.current_operation
        if self.operation_start_time:
            metrics["elapsed_time"] = time.time() - self.operation_start_time

        self.logger.info(message, extra={"metrics": metrics})

    def stop(self):
        """
        Stop tracking the current operation.

        Returns:
            float or None: Duration of the operation in seconds
        """
        duration = None
        if self.operation_start_time:
            duration = time.time() - self.operation_start_time

        self.logger.debug("Resource monitoring stopped", extra={
            "metrics": {
                "operation": self.current_operation,
                "duration": duration,
            }
        })

        self.current_operation = None
        self.operation_start_time = None
        return duration
