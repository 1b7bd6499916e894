"""
FastAPI Backend for the Frame Recommendation & PD Capture Application.
Provides endpoints for frame recommendations and guided PD capture sessions.
"""

from contextlib import asynccontextmanager
from typing import Optional, Tuple, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from frame_engine.config import settings
from frame_engine.lens import LensIndex
from frame_engine.logging_conf import configure_logging
from frame_engine.prescription import EyeMeasurement, Prescription, parse_axis
from frame_engine.sample_filter import FaceSample
from frame_engine.utils import parse_number
from prescription_service import get_service

NumericEntry = Optional[Union[float, str]]


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Frame Recommendation API",
    description="API for prescription-based frame recommendations and PD capture",
    version="1.0.0"
)

# Add CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.allow_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class EyeRequest(BaseModel):
    """One eye; numbers or raw form text ("+1.25", "")."""
    sphere: NumericEntry = None
    cylinder: NumericEntry = None
    axis: NumericEntry = None

    def to_model(self) -> EyeMeasurement:
        return EyeMeasurement(
            sphere=_parse(self.sphere),
            cylinder=_parse(self.cylinder),
            axis=parse_axis(None if self.axis is None else str(self.axis)),
        )


class PrescriptionRequest(BaseModel):
    od: EyeRequest = EyeRequest()
    os: EyeRequest = EyeRequest()
    pd: NumericEntry = None

    def to_model(self) -> Prescription:
        return Prescription(od=self.od.to_model(), os=self.os.to_model(), pd=_parse(self.pd))


class LensThicknessRequest(BaseModel):
    power: float
    index: LensIndex = LensIndex.POLY


class SampleRequest(BaseModel):
    """One face-tracking frame (positions in metres)."""
    gaze: Tuple[float, float]
    left_eye_center: Tuple[float, float, float]
    right_eye_center: Tuple[float, float, float]
    left_eye_forward: Tuple[float, float, float]
    right_eye_forward: Tuple[float, float, float]

    def to_sample(self) -> FaceSample:
        return FaceSample(
            gaze=self.gaze,
            left_eye_center=self.left_eye_center,
            right_eye_center=self.right_eye_center,
            left_eye_forward=self.left_eye_forward,
            right_eye_forward=self.right_eye_forward,
        )


def _parse(value: NumericEntry) -> Optional[float]:
    if value is None:
        return None
    return parse_number(str(value))


def _unknown_session(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session not found: {session_id}")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Frame Recommendation API"}


@app.post("/api/recommendations")
async def recommend(request: PrescriptionRequest):
    """Recommend frames for the posted prescription (stateless)."""
    return get_service().recommend(request.to_model())


@app.get("/api/prescription")
async def get_prescription():
    return get_service().get_prescription()


@app.put("/api/prescription")
async def put_prescription(request: PrescriptionRequest):
    """Replace the session prescription and return the new recommendation."""
    return get_service().update_prescription(request.to_model())


@app.post("/api/lens-thickness")
async def lens_thickness(request: LensThicknessRequest):
    return get_service().lens_thickness(request.power, request.index)


@app.post("/api/pd-sessions")
async def start_pd_session():
    """Start a guided PD capture."""
    return get_service().start_session()


@app.get("/api/pd-sessions/{session_id}")
async def get_pd_session(session_id: str):
    try:
        return get_service().get_session(session_id).to_dict()
    except KeyError:
        raise _unknown_session(session_id)


@app.post("/api/pd-sessions/{session_id}/samples")
async def add_pd_sample(session_id: str, request: SampleRequest):
    """Feed one sensor frame into the capture."""
    try:
        return get_service().add_sample(session_id, request.to_sample())
    except KeyError:
        raise _unknown_session(session_id)


@app.post("/api/pd-sessions/{session_id}/reset")
async def reset_pd_session(session_id: str):
    try:
        return get_service().reset_session(session_id)
    except KeyError:
        raise _unknown_session(session_id)


@app.delete("/api/pd-sessions/{session_id}")
async def close_pd_session(session_id: str):
    try:
        get_service().close_session(session_id)
    except KeyError:
        raise _unknown_session(session_id)
    return {"session_id": session_id, "closed": True}


if __name__ == "__main__":
    import uvicorn
    print("\n" + "="*60)
    print("  Frame Recommendation API Server")
    print("="*60)
    print("\n  Starting server on http://0.0.0.0:8000")
    print("  API docs: http://localhost:8000/docs")
    print("\n" + "="*60 + "\n")

    uvicorn.run(app, host="0.0.0.0", port=8000)
