"""
REST API for Claim Proofs

This module provides a FastAPI-based REST API for submitting Merkle distribution
claims and querying the distributor, with full OpenAPI documentation.
"""

import logging
import threading
import traceback

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import get_initial_balance, load_config
from ..distributor import (
    AlreadyClaimedError,
    ClaimError,
    InvalidProofError,
    InvalidSignatureError,
    MerkleDistributor,
    TransferFailedError,
)
from ..ledger import InMemoryLedger
from ..models.api_models import (
    ClaimRequest,
    ClaimResponse,
    ClaimStatusResponse,
    DigestResponse,
    DistributorInfoResponse,
    ErrorResponse,
    HealthResponse,
    ProofCheckRequest,
    ProofCheckResponse,
    SignatureCheckRequest,
    SignatureCheckResponse,
)
from .claim_service import ClaimService, ClaimServiceError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Status codes for each claim rejection; every code is distinct
CLAIM_ERROR_STATUS = {
    AlreadyClaimedError: 409,
    InvalidSignatureError: 403,
    InvalidProofError: 400,
    TransferFailedError: 502,
}

# Initialize FastAPI app
app = FastAPI(
    title="Claim Proofs API",
    description="""
    Submit and inspect claims against a Merkle distribution.

    Each eligible account may claim exactly once. A claim carries a Merkle proof
    of the (account, amount) leaf and the account's EIP-712 signature over the
    claim, so anyone (the account itself or a relayer) can submit it. Tokens are
    always paid to the account.

    ## Error Codes
    - **ALREADY_CLAIMED** (409): the account's claim was already consumed
    - **INVALID_SIGNATURE** (403): the signature does not recover to the account
    - **INVALID_PROOF** (400): the proof does not match the published root
    - **TRANSFER_FAILED** (502): the ledger could not pay out; nothing was recorded
    """,
    version=__version__,
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    }
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global distributor instance
distributor = None
_distributor_lock = threading.Lock()


def get_distributor() -> MerkleDistributor:
    """Dependency to get the distributor instance, built from the environment on first use."""
    global distributor
    if distributor is None:
        # Endpoints run in a threadpool; only one thread may build the instance
        with _distributor_lock:
            if distributor is None:
                config = load_config()
                ledger = InMemoryLedger(
                    token=config.token,
                    holder=config.domain.verifying_contract,
                    balances={config.domain.verifying_contract: get_initial_balance()},
                )
                distributor = MerkleDistributor(config, ledger)
    return distributor


def get_claim_service(d: MerkleDistributor = Depends(get_distributor)) -> ClaimService:
    return ClaimService(d)


@app.exception_handler(ClaimError)
async def claim_error_handler(request, exc: ClaimError):
    """Handle claim rejections with a distinct code per failed precondition."""
    status_code = CLAIM_ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=str(exc),
            code=exc.code,
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.exception_handler(ClaimServiceError)
async def claim_service_error_handler(request, exc: ClaimServiceError):
    logger.error(f"Claim service error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=str(exc),
            code="VALIDATION_ERROR",
            details={"error_type": "ClaimServiceError"}
        ).model_dump()
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle validation errors."""
    logger.error(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=str(exc),
            code="VALIDATION_ERROR",
            details={"error_type": "ValueError"}
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code="INTERNAL_ERROR",
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.get("/", response_model=dict)
async def root():
    """API root endpoint with basic information."""
    return {
        "name": "Claim Proofs API",
        "version": __version__,
        "description": "Submit and verify Merkle distribution claims",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Reports whether a distributor can be built from the current configuration.
    """
    try:
        get_distributor()
        return HealthResponse(status="healthy", distributor=True, version=__version__)
    except ValueError as e:
        logger.warning(f"Health check failed: {e}")
        return HealthResponse(status="degraded", distributor=False, version=__version__)


@app.post("/claims", response_model=ClaimResponse)
def submit_claim(request: ClaimRequest, service: ClaimService = Depends(get_claim_service)):
    """
    Submit a claim for an eligible account.

    The submitter may be the account itself or a relayer; the payout always
    goes to `account`. Checks run in order: already claimed, signature, proof.
    """
    result = service.submit_claim(
        request.account, request.amount, request.proof, request.v, request.r, request.s
    )
    return ClaimResponse(**result)


@app.get("/claims/{account}", response_model=ClaimStatusResponse)
def get_claim_status(account: str, service: ClaimService = Depends(get_claim_service)):
    """Return whether an account has already claimed."""
    return ClaimStatusResponse(**service.claim_status(account))


@app.get("/distributor", response_model=DistributorInfoResponse)
def get_distributor_info(service: ClaimService = Depends(get_claim_service)):
    """Return the root, asset, type hash and signing domain of this distributor."""
    return DistributorInfoResponse(**service.distributor_info())


@app.post("/verify/signature", response_model=SignatureCheckResponse)
def verify_signature(request: SignatureCheckRequest, service: ClaimService = Depends(get_claim_service)):
    """
    Check a claim signature without submitting the claim.

    Diagnostic helper: it has no side effects and does not reserve the claim.
    """
    result = service.check_signature(request.account, request.amount, request.v, request.r, request.s)
    return SignatureCheckResponse(**result)


@app.post("/verify/proof", response_model=ProofCheckResponse)
def verify_proof(request: ProofCheckRequest, service: ClaimService = Depends(get_claim_service)):
    """
    Check a Merkle proof without submitting the claim.

    Diagnostic helper: it has no side effects and does not reserve the claim.
    """
    return ProofCheckResponse(**service.check_proof(request.account, request.amount, request.proof))


@app.get("/digest/{account}/{amount}", response_model=DigestResponse)
def get_digest(account: str, amount: int, service: ClaimService = Depends(get_claim_service)):
    """Return the leaf and EIP-712 authorization digest for (account, amount)."""
    return DigestResponse(**service.digests(account, amount))


def run_server(host: str = "127.0.0.1", port: int = 8000, dev: bool = False):
    """
    Run the API server.

    Args:
        host: Host to bind to
        port: Port to bind to
        dev: Enable development mode with auto-reload
    """
    logger.info(f"Starting Claim Proofs API server on {host}:{port}")
    uvicorn.run(
        "claim_proofs.api.rest_api:app",
        host=host,
        port=port,
        reload=dev,
        log_level="info"
    )


if __name__ == "__main__":
    run_server(dev=True)
