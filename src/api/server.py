import logging
import time
from typing import Any, Dict

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from engine.pipeline import build_converter, convert_tracks
from formats.gpse import gpse_to_gpx
from formats.gpx import parse_gpx, write_gpx
from shared.errors import ConversionError, FormatError, GpseFormatError, GpxFormatError, LengthMismatchError

VERSION = "1.0.0"

app = FastAPI(title="gpx-datum-tools API", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger("api")


@app.get("/health")
def health_check():
    return {"status": "ok", "version": VERSION}


@app.post("/api/v1/tokyo2jgd")
async def tokyo2jgd_endpoint(payload: Dict[str, Any] = Body(...)):
    """GPX (日本測地系) → GPX (世界測地系). use_tky2jgd=true 이면 Web版 TKY2JGD 사용."""
    start_ms = time.time() * 1000
    gpx_text = payload.get("gpx")
    use_tky2jgd = payload.get("use_tky2jgd", False)

    if not isinstance(gpx_text, str) or not gpx_text.strip():
        raise HTTPException(status_code=400, detail="INVALID_GPX: 'gpx' must be a non-empty string")

    try:
        doc = parse_gpx(gpx_text)
    except GpxFormatError as e:
        raise HTTPException(status_code=400, detail=f"INVALID_GPX: {e}")

    converter = build_converter("tky2jgd" if use_tky2jgd else "local")
    try:
        await convert_tracks(doc.tracks, converter)
        output = write_gpx(doc)
    except ConversionError as e:
        logger.error(f"TKY2JGD Error: {e}")
        raise HTTPException(status_code=502, detail=f"TKY2JGD_ERROR: {e}")
    except LengthMismatchError as e:
        logger.error(f"Length mismatch: {e}")
        raise HTTPException(status_code=502, detail=f"LENGTH_MISMATCH: {e}")
    except FormatError as e:
        raise HTTPException(status_code=502, detail=f"TKY2JGD_ERROR: unreadable result: {e}")
    except Exception as e:
        logger.error(f"Transform Error: {e}")
        raise HTTPException(status_code=500, detail=f"TRANSFORM_ERROR: {str(e)}")

    end_ms = time.time() * 1000
    return {
        "success": True,
        "data": {"gpx": output, "points": doc.point_count(), "converter": converter.name},
        "meta": {"processing_time_ms": int(end_ms - start_ms)},
    }


@app.post("/api/v1/gpse2gpx")
def gpse2gpx_endpoint(payload: Dict[str, Any] = Body(...)):
    """GPSe 텍스트(디코딩 완료된 문자열) → GPX"""
    start_ms = time.time() * 1000
    gpse_text = payload.get("gpse")

    if not isinstance(gpse_text, str) or not gpse_text.strip():
        raise HTTPException(status_code=400, detail="INVALID_GPSE: 'gpse' must be a non-empty string")

    try:
        output = gpse_to_gpx(gpse_text)
    except GpseFormatError as e:
        raise HTTPException(status_code=400, detail=f"INVALID_GPSE: {e}")

    end_ms = time.time() * 1000
    return {
        "success": True,
        "data": {"gpx": output},
        "meta": {"processing_time_ms": int(end_ms - start_ms)},
    }
