"""
FastAPI web service for the ring SOM TSP solver with observability
"""

import io
import json
import os
import time
import uuid
import structlog
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any

import pandas as pd
from fastapi import FastAPI, HTTPException, UploadFile, File, Request
from fastapi.responses import FileResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import BaseModel, Field
import uvicorn

# Set matplotlib backend to Agg (non-interactive) before importing pyplot
import matplotlib

matplotlib.use("Agg")

from somtsp import (  # noqa: E402
    RingSOM,
    RingSOMConfig,
    NeighborhoodKind,
    cities_from_records,
    setup_logging,
    trace_operation,
    get_metrics,
    get_health_status,
    log_training_metrics,
    log_tour_metrics,
    update_stored_runs_count,
    RequestTracingMiddleware,
)
from somtsp.datasets import cities_from_frame  # noqa: E402
from somtsp.observability import log_request_metrics, CONTENT_TYPE_LATEST  # noqa: E402

VERSION = "0.1.0"


# Pydantic models for API requests/responses
class CityModel(BaseModel):
    """A labeled 2-D point"""

    name: Optional[str] = None
    x: float
    y: float


class RingSOMConfigRequest(BaseModel):
    """Hyperparameters for a ring SOM run"""

    n_neurons: Optional[int] = Field(
        default=None, ge=1, le=100_000, description="Twice the city count if unset"
    )
    n_iterations: int = Field(default=100, ge=0, le=10_000)
    neighborhood: NeighborhoodKind = NeighborhoodKind.ELASTIC
    initial_alpha: float = Field(default=0.8, gt=0, le=1)
    alpha_decay: float = Field(default=0.99, gt=0, le=1)
    initial_sigma: float = Field(default=10.0, gt=0)
    sigma_decay: float = Field(default=0.97, gt=0, le=1)
    seed: Optional[int] = Field(default=None, ge=0)


class SolveRequest(BaseModel):
    """Request to solve a TSP instance"""

    cities: List[CityModel] = Field(description="Cities to visit")
    config: RingSOMConfigRequest = Field(default_factory=RingSOMConfigRequest)


class SolveResponse(BaseModel):
    """Tour read off a trained ring"""

    run_id: str
    tour: List[CityModel]
    tour_length: float
    neurons: List[List[float]]
    training_duration: float
    message: str


class RunInfo(BaseModel):
    """Information about a stored run"""

    run_id: str
    config: Dict[str, Any]
    n_cities: int
    n_neurons: int
    total_iterations: int
    tour_length: Optional[float]
    created_at: str


# Global storage for solved runs (in production, use Redis/database)
runs_storage: Dict[str, RingSOM] = {}

# Initialize observability
setup_logging(
    log_level=os.getenv("LOG_LEVEL", "INFO"),
    json_format=os.getenv("LOG_FORMAT", "json").lower() == "json",
)

logger = structlog.get_logger()

# FastAPI app
app = FastAPI(
    title="Ring SOM TSP API",
    description="A REST API for approximate TSP tours with ring Self-Organizing Maps",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        correlation_id = request.scope.get("correlation_id", "unknown")
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        duration = time.time() - start_time
        log_request_metrics(
            method=request.method,
            endpoint=request.url.path,
            status_code=response.status_code,
            duration=duration,
        )

        logger.info(
            "HTTP request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            duration_seconds=duration,
            correlation_id=correlation_id,
        )

        return response


app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestTracingMiddleware)


def _get_run(run_id: str) -> RingSOM:
    if run_id not in runs_storage:
        raise HTTPException(status_code=404, detail="Run not found")
    return runs_storage[run_id]


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {"message": "Ring SOM TSP API", "version": VERSION, "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Health check endpoint with system status"""
    health_status = get_health_status()
    health_status["runs_stored"] = len(runs_storage)
    health_status["version"] = VERSION

    update_stored_runs_count(len(runs_storage))

    logger.info("Health check requested", status=health_status["status"])
    return health_status


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    logger.debug("Metrics requested")
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)


@app.post("/solve", response_model=SolveResponse)
def solve_tsp(request: SolveRequest, http_request: Request):
    """Train a ring on the cities and return the extracted tour"""

    with trace_operation(
        "tsp_solve",
        correlation_id=http_request.scope.get("correlation_id"),
        cities=len(request.cities),
        neighborhood=request.config.neighborhood.value,
    ):
        if not request.cities:
            raise HTTPException(status_code=400, detail="Empty city list provided")

        try:
            cities = cities_from_records(
                [city.model_dump() for city in request.cities]
            )

            config_dict = request.config.model_dump()
            if config_dict["n_neurons"] is None:
                config_dict["n_neurons"] = 2 * len(cities)
            config = RingSOMConfig(**config_dict)

            start_time = time.time()
            som = RingSOM(config, verbose=False)
            result = som.solve(cities)
            training_duration = time.time() - start_time
        except ValueError as e:
            logger.error(
                "Solve failed - invalid input",
                error=str(e),
            )
            raise HTTPException(status_code=400, detail=f"Invalid input: {e}")
        except Exception as e:
            logger.error(
                "Solve failed - unexpected error",
                error=str(e),
            )
            raise HTTPException(status_code=500, detail=f"Solve failed: {e}")

        neighborhood = config.neighborhood.value
        log_training_metrics(neighborhood, training_duration, config.n_iterations)
        log_tour_metrics(neighborhood, result.length)

        run_id = str(uuid.uuid4())
        runs_storage[run_id] = som
        update_stored_runs_count(len(runs_storage))

        logger.info(
            "Tour solved",
            run_id=run_id,
            tour_length=result.length,
            training_duration=training_duration,
            cities=len(cities),
        )

        return SolveResponse(
            run_id=run_id,
            tour=[CityModel(name=c.name, x=c.x, y=c.y) for c in result.tour],
            tour_length=result.length,
            neurons=result.neurons.to_list(),
            training_duration=training_duration,
            message=f"Tour over {len(cities)} cities solved",
        )


@app.get("/runs", response_model=List[str])
async def list_runs():
    """List all stored runs"""
    return list(runs_storage.keys())


@app.get("/runs/{run_id}", response_model=RunInfo)
async def get_run_info(run_id: str):
    """Get information about a stored run"""
    som = _get_run(run_id)
    info = som.get_info()

    return RunInfo(
        run_id=run_id,
        config=info["config"],
        n_cities=info["n_cities"],
        n_neurons=info["n_neurons"],
        total_iterations=info["total_iterations"],
        tour_length=info.get("tour_length"),
        created_at=som.metadata["creation_time"],
    )


@app.delete("/runs/{run_id}")
async def delete_run(run_id: str):
    """Delete a stored run"""
    _get_run(run_id)
    del runs_storage[run_id]
    update_stored_runs_count(len(runs_storage))
    return {"message": f"Run {run_id} deleted successfully"}


@app.get("/runs/{run_id}/plot")
def plot_run(run_id: str, type: str = "tour"):
    """Render a plot of a stored run"""
    som = _get_run(run_id)

    if type not in ["tour", "training"]:
        raise HTTPException(status_code=400, detail="Type must be 'tour' or 'training'")

    plots_dir = Path("plots")
    plots_dir.mkdir(exist_ok=True)

    plot_filename = f"{run_id}_{type}.png"
    plot_path = plots_dir / plot_filename

    try:
        if type == "tour":
            som.plot_tour(show_plot=False, save_path=plot_filename)
        else:
            som.plot_training_progress(show_plot=False, save_path=plot_filename)

        return FileResponse(
            str(plot_path), media_type="image/png", filename=plot_filename
        )
    except Exception as e:
        plot_path.unlink(missing_ok=True)
        raise HTTPException(status_code=500, detail=f"Plot failed: {e}")


@app.post("/upload")
async def upload_cities(file: UploadFile = File(...)):
    """Parse an uploaded city file and return the cities"""
    try:
        content = (await file.read()).decode("utf-8")

        if file.filename.endswith(".json"):
            data = json.loads(content)
            if isinstance(data, dict) and "cities" in data:
                data = data["cities"]
            cities = cities_from_records(data)
        elif file.filename.endswith(".csv"):
            cities = cities_from_frame(pd.read_csv(io.StringIO(content)))
        else:
            raise HTTPException(
                status_code=400, detail="Unsupported file format. Use CSV or JSON."
            )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Failed to parse file: {e}")

    return {
        "filename": file.filename,
        "n_cities": len(cities),
        "cities": [{"name": c.name, "x": c.x, "y": c.y} for c in cities],
        "uploaded_at": datetime.now().isoformat(),
        "message": f"Cities loaded successfully: {len(cities)} cities",
    }


def main():
    """Run the FastAPI server"""
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("api:app", host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
