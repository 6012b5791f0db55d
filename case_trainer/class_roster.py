from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .models import ClassRoom, User
from .schemas import (
    ClassCreateRequest,
    ClassRoomPayload,
    ClassStudentAddRequest,
    UserPayload,
)
from .view_state import Screen


def student_label(student: User) -> str:
    return f"{student.full_name or ''} ({student.username})"


@dataclass
class ClassRosterScreen(Screen):
    classes: list[ClassRoom] = field(init=False, default_factory=list)
    students: list[User] = field(init=False, default_factory=list)
    current_class: Optional[ClassRoom] = field(init=False, default=None)

    def load(self) -> None:
        # One loader, so a failed fetch cannot be masked by a later success.
        loaded = self._load(lambda: (self._fetch_classes(), self._fetch_students()))
        if loaded is None:
            return
        classes, self.students = loaded
        self._apply_classes(classes)

    def load_classes(self) -> None:
        loaded = self._load(self._fetch_classes)
        if loaded is not None:
            self._apply_classes(loaded)

    def _fetch_classes(self) -> list[ClassRoom]:
        raw = self.api.get("/classes", self.auth)
        return [ClassRoomPayload.model_validate(item).to_model() for item in raw or []]

    def _fetch_students(self) -> list[User]:
        raw = self.api.get("/users", self.auth, params={"role": "student"})
        return [UserPayload.model_validate(item).to_model() for item in raw or []]

    def _apply_classes(self, classes: list[ClassRoom]) -> None:
        self.classes = classes
        if self.current_class is not None:
            self.current_class = self._find_class(self.current_class.id)

    def create_class(self, name: str) -> bool:
        if not name.strip():
            self.prompter.alert("请输入班级名称")
            return False
        ok, _ = self._mutate(
            lambda: self.api.post(
                "/classes", ClassCreateRequest(name=name).model_dump(), self.auth
            ),
            failure_alert="创建失败",
        )
        if ok:
            self.load_classes()
        return ok

    def delete_class(self, class_id: int) -> bool:
        if not self.prompter.confirm("确定删除该班级吗？"):
            return False
        ok, _ = self._mutate(
            lambda: self.api.delete(f"/classes/{class_id}", self.auth),
            failure_alert="删除失败",
        )
        if ok:
            if self.current_class is not None and self.current_class.id == class_id:
                self.current_class = None
            self.load_classes()
        return ok

    def open_manage(self, classroom: ClassRoom) -> None:
        self.current_class = classroom

    def close_manage(self) -> None:
        self.current_class = None

    def available_students(self) -> list[User]:
        if self.current_class is None:
            return list(self.students)
        return [s for s in self.students if not self.current_class.has_student(s.id)]

    def add_student(self, student_id: int) -> bool:
        classroom = self._require_current()
        body = ClassStudentAddRequest(student_id=student_id).model_dump()
        ok, _ = self._mutate(
            lambda: self.api.post(f"/classes/{classroom.id}/students", body, self.auth),
            failure_alert="添加失败",
        )
        if ok:
            self.load_classes()
        return ok

    def remove_student(self, student_id: int) -> bool:
        classroom = self._require_current()
        ok, _ = self._mutate(
            lambda: self.api.delete(
                f"/classes/{classroom.id}/students/{student_id}", self.auth
            ),
            failure_alert="移除失败",
        )
        if ok:
            self.load_classes()
        return ok

    def _require_current(self) -> ClassRoom:
        if self.current_class is None:
            raise RuntimeError("No class is open for roster management.")
        return self.current_class

    def _find_class(self, class_id: int) -> Optional[ClassRoom]:
        for classroom in self.classes:
            if classroom.id == class_id:
                return classroom
        return None
