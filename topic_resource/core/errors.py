"""RFC 7807 *Problem Details* handlers for the HTTP surface."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from topic_resource.core.exceptions import InvalidTopicInfo, ProblemDetail, TopicResourceError


def _problem(status: int, title: str, type_: str, detail: str) -> JSONResponse:
    problem = ProblemDetail(type=type_, title=title, status=status, detail=detail)
    return JSONResponse(
        status_code=status,
        content=problem.model_dump(mode="json"),
        media_type="application/problem+json",
    )


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidTopicInfo)
    async def invalid_topic_info(_: Request, exc: InvalidTopicInfo):
        return _problem(400, "Invalid topic properties", "/invalid-topic-info", str(exc))

    # Catch-all for the package's own errors
    @app.exception_handler(TopicResourceError)
    async def unhandled(_: Request, exc: TopicResourceError):
        return _problem(500, "Internal Server Error", "about:blank", str(exc))
