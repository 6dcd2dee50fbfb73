from journey.progress.tracker import ProgressTracker, CourseProgress

__all__ = ["ProgressTracker", "CourseProgress"]
