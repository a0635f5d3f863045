import logging
from dataclasses import asdict
from typing import Literal

from fastapi import FastAPI, HTTPException # type: ignore
from pydantic import BaseModel # type: ignore

from adapters.detect import detect_language
from adapters.registry import get_adapter
from diagram.config import LOG_LEVEL, MAX_ROLES, MERGE_ROLES, STRICT_ANNOTATIONS, PipelineConfig
from diagram.errors import (
    AnnotationError,
    DocCommentError,
    DuplicateObjectError,
    ObjectKindConflictError,
)
from diagram.graph import DiagramGraph
from diagram.model import Diagram
from diagram.package_tree import build_package_tree
from renderers.graphviz import render_graphviz
from renderers.java import render_java
from renderers.latex import render_latex
from renderers.plantuml import render_plantuml

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Class Diagram Service")

RENDERERS = {
    "graphviz": render_graphviz,
    "plantuml": render_plantuml,
    "latex": render_latex,
    "java": render_java,
}


class Req(BaseModel):
    code: str
    filename: str | None = None


class ParseRequest(BaseModel):
    code: str
    filename: str | None = None
    language: str | None = None     # skips detection when set
    merge: bool = MERGE_ROLES
    max_roles: int = MAX_ROLES
    strict: bool = STRICT_ANNOTATIONS


class RenderRequest(ParseRequest):
    format: Literal["graphviz", "plantuml", "latex", "java"] = "plantuml"
    package: str | None = None     # dotted path below the common prefix
    adjacent: bool = False


def _build(req: ParseRequest) -> tuple[str, Diagram]:
    if req.language:
        lang = req.language
    else:
        lang, conf, source = detect_language(req.code, req.filename)
        logger.info("detected %s (%.2f via %s)", lang, conf, source)
    adapter = get_adapter(lang)

    config = PipelineConfig(merge=req.merge, max_roles=req.max_roles, strict=req.strict)
    try:
        return lang, adapter.build_diagram_for_code(req.code, req.filename, config)
    except (DuplicateObjectError, ObjectKindConflictError) as e:
        raise HTTPException(status_code=409, detail={"error": str(e), **e.details})
    except (AnnotationError, DocCommentError) as e:
        raise HTTPException(status_code=400, detail={"error": str(e), **e.details})


def _run(req: ParseRequest) -> tuple[str, Diagram]:
    try:
        return _build(req)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/detect")
def detect(req: Req):
    lang, conf, source = detect_language(req.code, req.filename)
    return {
        "language": lang,
        "confidence": conf,
        "source": source
    }


@app.post("/parse")
def parse(req: ParseRequest):
    lang, diagram = _run(req)
    return {
        "language": lang,
        "diagram": DiagramGraph.from_diagram(diagram).to_debug_json(),
        "diagnostics": [asdict(d) for d in diagram.diagnostics],
        "parse_errors": diagram.parse_errors,
    }


@app.post("/render")
def render(req: RenderRequest):
    lang, diagram = _run(req)

    try:
        tree = build_package_tree(diagram)
        root = tree.get(req.package.split(".")) if req.package else tree
        if root is None:
            raise HTTPException(status_code=404, detail={"error": f"Unknown package: {req.package}"})

        view = diagram.view([root])
        if req.adjacent:
            view = view.with_adjacent()
        output = RENDERERS[req.format](view)
    except ObjectKindConflictError as e:
        raise HTTPException(status_code=409, detail={"error": str(e), **e.details})

    return {
        "language": lang,
        "format": req.format,
        "output": output,
        "diagnostics": [asdict(d) for d in diagram.diagnostics],
    }
