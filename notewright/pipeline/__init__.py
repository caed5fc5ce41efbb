from .base import BasePhase, PhaseName
from .locate import LocatePhase
from .transcribe import TranscribePhase
from .classify import ClassifyPhase
from .compose import ComposePhase, MetadataBuilder, generate_metadata
from .complete import CompletePhase
from .processor import Processor
