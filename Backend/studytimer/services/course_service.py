import httpx
from pydantic import ValidationError

from studytimer.schemas.course import Course
from studytimer.services.api_client import ApiClient
from studytimer.services.errors import CourseServiceError


class CourseClient(ApiClient):
    """Reads and updates course progress on the dashboard API.

    Unlike notifications, course failures matter to the user, so every
    problem is raised as CourseServiceError.
    """

    async def get_course(self, course_id: int) -> Course:
        try:
            response = await self._http.get(
                self.url(f"/courses/{course_id}"), headers=self._headers
            )
        except httpx.HTTPError as exc:
            raise CourseServiceError(f"Fetching course {course_id} failed: {exc}") from exc
        self._check(response, f"Fetching course {course_id}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise CourseServiceError(f"Course {course_id} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise CourseServiceError(f"Course {course_id} returned an unexpected payload")

        try:
            return Course.model_validate({**payload, "id": course_id})
        except ValidationError as exc:
            raise CourseServiceError(f"Course {course_id} payload is incomplete") from exc

    async def update_course(self, course_id: int, completed_hours: float) -> None:
        try:
            response = await self._http.put(
                self.url(f"/courses/{course_id}"),
                headers=self._headers,
                json={"completedHours": completed_hours},
            )
        except httpx.HTTPError as exc:
            raise CourseServiceError(f"Updating course {course_id} failed: {exc}") from exc
        self._check(response, f"Updating course {course_id}")

    @staticmethod
    def _check(response: httpx.Response, action: str) -> None:
        if response.status_code >= 400:
            raise CourseServiceError(f"{action} returned status {response.status_code}")
