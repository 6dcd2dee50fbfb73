from journey.catalog.lessons import LessonCatalog, DatabaseLessonCatalog, RemoteLessonCatalog

__all__ = ["LessonCatalog", "DatabaseLessonCatalog", "RemoteLessonCatalog"]
