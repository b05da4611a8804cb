from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from dataclasses import asdict
from typing import List, Optional
import os
import threading
import uvicorn

from fasttext_facade.application.model_facade import FastTextFacade
from fasttext_facade.domain.errors import (
    FastTextFacadeError,
    IncompatibleFormatError,
    InitializationFailureError,
    InvalidArgumentError,
    ModelFileNotFoundError,
    ModelNotLoadedError,
    ResourceExtractionError,
    TrainingCommandError,
)
from fasttext_facade.infrastructure.fasttext_engine import FastTextEngine

# ── Configuration ────────────────────────────────────────────────────────────
MODEL_PATH_ENV = "FASTTEXT_MODEL_PATH"
DEFAULT_K = 1

ERROR_STATUS_CODES = {
    ModelFileNotFoundError: 404,
    IncompatibleFormatError: 400,
    InvalidArgumentError: 400,
    TrainingCommandError: 400,
    ModelNotLoadedError: 503,
    InitializationFailureError: 500,
    ResourceExtractionError: 500,
}

VECTOR_KINDS = ("word", "sentence", "subword")

# ── API Models ───────────────────────────────────────────────────────────────
class LoadRequest(BaseModel):
    path: str

class PredictRequest(BaseModel):
    text: str
    k: int = DEFAULT_K
    threshold: float = 0.0

class PredictionSchema(BaseModel):
    label: str
    log_prob: float
    probability: float

class PredictResponse(BaseModel):
    text: str
    predictions: List[PredictionSchema]

class VectorRequest(BaseModel):
    text: str

class VectorResponse(BaseModel):
    kind: str
    dim: int
    vector: List[float]

class TrainRequest(BaseModel):
    args: List[str] = Field(..., min_length=1)

# ── App Initialization ───────────────────────────────────────────────────────
app = FastAPI(
    title="fastText Facade API",
    description="Label prediction and embedding vectors from a fastText model.",
    version="1.0.0"
)

# One facade per process. FastAPI runs sync endpoints in a threadpool and the
# facade does no locking of its own, so every call goes through this lock.
facade = FastTextFacade(FastTextEngine())
facade_lock = threading.Lock()


def load_startup_model() -> None:
    model_path: Optional[str] = os.environ.get(MODEL_PATH_ENV)
    if not model_path:
        print(f"[API] WARNING: {MODEL_PATH_ENV} not set. Load a model via /model/load.")
        return
    try:
        with facade_lock:
            facade.load_model(model_path)
        print("[API] Startup model loaded. Service is READY.")
    except FastTextFacadeError as error:
        print(f"[API] WARNING: startup model '{model_path}' not loaded: {error}")


load_startup_model()


@app.exception_handler(FastTextFacadeError)
def handle_facade_error(request: Request, error: FastTextFacadeError):
    status_code = next(
        (code for cls, code in ERROR_STATUS_CODES.items() if isinstance(error, cls)),
        500,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": type(error).__name__, "detail": str(error)},
    )

# ── Endpoints ────────────────────────────────────────────────────────────────
@app.get("/")
def read_root():
    return {
        "message": "fastText facade API is running.",
        "status": "ready" if facade.is_loaded else "model_required",
    }

@app.get("/status")
def get_status():
    """Returns the lifecycle state and basic facts about the loaded model."""
    with facade_lock:
        return {
            "state": facade.state.value,
            "model_path": facade.model_path,
            "dim": facade.dim if facade.is_loaded else None,
        }

@app.post("/model/load")
def load_model(request: LoadRequest):
    with facade_lock:
        facade.load_model(request.path)
        return {"message": f"Loaded '{request.path}'.", "dim": facade.dim}

@app.post("/model/load-default")
def load_default_model():
    with facade_lock:
        facade.load_bundled_default()
        return {"message": "Loaded bundled default model.", "dim": facade.dim}

@app.post("/model/unload")
def unload_model():
    with facade_lock:
        facade.unload_model()
    return {"message": "Model unloaded.", "state": facade.state.value}

@app.post("/predict", response_model=PredictResponse)
def predict(request: PredictRequest):
    with facade_lock:
        predictions = facade.predict_top_k(request.text, request.k, request.threshold)

    return PredictResponse(
        text=request.text,
        predictions=[
            PredictionSchema(
                label=p.label,
                log_prob=round(p.log_prob, 6),
                probability=round(p.probability, 6),
            )
            for p in predictions
        ],
    )

@app.post("/vectors/{kind}", response_model=VectorResponse)
def get_vector(kind: str, request: VectorRequest):
    if kind not in VECTOR_KINDS:
        raise HTTPException(status_code=404, detail=f"Unknown vector kind '{kind}'")

    with facade_lock:
        if kind == "word":
            vector = facade.word_vector(request.text)
        elif kind == "sentence":
            vector = facade.sentence_vector(request.text)
        else:
            vector = facade.subword_vector(request.text)

    return VectorResponse(kind=kind, dim=len(vector), vector=[float(v) for v in vector])

@app.get("/hyperparameters")
def get_hyperparameters():
    with facade_lock:
        snapshot = facade.hyperparameters
        return {
            **asdict(snapshot),
            "n_words": facade.n_words,
            "n_labels": facade.n_labels,
        }

@app.get("/labels")
def get_labels():
    with facade_lock:
        return {"labels": facade.labels()}

@app.post("/train")
def train(request: TrainRequest):
    """Run a training command. The trained model is not loaded automatically."""
    try:
        facade.run_training_command(request.args)
    except FastTextFacadeError:
        raise
    except (ValueError, RuntimeError, OSError) as e:
        print(f"[API] Training failed: {e}")
        raise HTTPException(status_code=500, detail=f"Training failed: {str(e)}")
    return {"message": "Training complete.", "args": request.args}

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
