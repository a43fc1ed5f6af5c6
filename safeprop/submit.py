# -*- coding: utf-8 -*-
from dataclasses import dataclass

from hexbytes import HexBytes

from .keystore import Signer
from .log import logger
from .proposal import Proposal, proposal_hash
from .relay import SafeTxServiceClient


@dataclass(frozen=True)
class SubmissionResult:
    proposal: Proposal
    proposal_hash: HexBytes
    sender_address: str

    @property
    def hash_hex(self) -> str:
        return "0x" + bytes(self.proposal_hash).hex()


class ProposalSubmitter:
    def __init__(self, relay: SafeTxServiceClient) -> None:
        self.relay = relay

    def prepare(self, proposal: Proposal) -> Proposal:
        """Pin the nonce. Proposals built without one take the Safe's current nonce from the relay."""
        if proposal.nonce is not None:
            return proposal
        nonce = self.relay.get_nonce(proposal.safe_address)
        logger.info(f"🔢 Relay nonce for {proposal.safe_address}: {nonce}")
        return proposal.with_nonce(nonce)

    def submit(self, proposal: Proposal, signer: Signer) -> SubmissionResult:
        proposal = self.prepare(proposal)
        digest = proposal_hash(proposal)
        signature = signer.sign_digest(digest)
        sender = signer.address
        # relay errors propagate untouched; the service owns dedup/conflict policy
        self.relay.propose(proposal, digest, sender, signature)
        return SubmissionResult(proposal=proposal, proposal_hash=digest, sender_address=sender)
