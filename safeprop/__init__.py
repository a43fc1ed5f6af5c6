# -*- coding: utf-8 -*-
"""
safeprop — Safe governance proposals from an encrypted keystore.

Pipeline: SecretResolver → load_signer → build_proposal → ProposalSubmitter.
"""

from .errors import (
    ChainMismatchError,
    ConfigurationError,
    CredentialReadError,
    DecryptionError,
    EmptyProposalError,
    InvalidAddressError,
    InvalidArgumentError,
    NetworkError,
    ProposalError,
    RelayRejectionError,
)
from .config import Settings
from .masked import MaskedWriter, read_masked_line
from .passphrase import SecretResolver
from .keystore import Signer, load_signer
from .proposal import Call, Proposal, build_proposal, proposal_hash
from .relay import SafeTxServiceClient
from .submit import ProposalSubmitter, SubmissionResult
from .pipeline import Outcome, ProposalPipeline

__version__ = "0.1.0"

__all__ = [
    "Call",
    "ChainMismatchError",
    "ConfigurationError",
    "CredentialReadError",
    "DecryptionError",
    "EmptyProposalError",
    "InvalidAddressError",
    "InvalidArgumentError",
    "MaskedWriter",
    "NetworkError",
    "Outcome",
    "Proposal",
    "ProposalError",
    "ProposalPipeline",
    "ProposalSubmitter",
    "RelayRejectionError",
    "SafeTxServiceClient",
    "SecretResolver",
    "Settings",
    "Signer",
    "SubmissionResult",
    "build_proposal",
    "load_signer",
    "proposal_hash",
    "read_masked_line",
]
