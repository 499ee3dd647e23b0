"""
Engine configuration for the UCI adapter.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional


@dataclass
class EngineConfig:
    """Configuration for one engine subprocess.

    Collects the binary location, the UCI options sent after the
    handshake and the timing knobs of the reader and the readiness
    rendezvous.
    """

    # Process
    engine_path: Path = Path("/usr/bin/stockfish")
    """Path to the UCI engine binary"""

    working_dir: Optional[Path] = None
    """Working directory of the engine (None = user home)"""

    # UCI options
    threads: int = 1
    """Value of the Threads option"""

    hash_mb: int = 512
    """Value of the Hash option, in MB"""

    ponder: bool = True
    """Value of the Ponder option"""

    skill_level: int = 0
    """Value of the Skill Level option (0-20)"""

    extra_options: Dict[str, str] = field(default_factory=dict)
    """Additional setoption name/value pairs, sent in insertion order"""

    # Timing
    ready_timeout: float = 3.0
    """Seconds to wait for readyok before assuming the engine crashed"""

    handshake_timeout: float = 10.0
    """Seconds to wait for uciok after spawning"""

    read_chunk_size: int = 8192
    """Maximum bytes per read from the engine's stdout"""

    read_retry_delay: float = 1.0
    """Seconds to sleep after a failed read before retrying"""

    shutdown_timeout: float = 2.0
    """Seconds to wait for the engine to exit after quit"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.engine_path = Path(self.engine_path)
        if self.working_dir is not None:
            self.working_dir = Path(self.working_dir)

        if self.threads <= 0:
            raise ValueError(f"threads must be positive, got {self.threads}")

        if self.hash_mb <= 0:
            raise ValueError(f"hash_mb must be positive, got {self.hash_mb}")

        if not 0 <= self.skill_level <= 20:
            raise ValueError(f"skill_level should be between 0 and 20, got {self.skill_level}")

        for name in ("ready_timeout", "handshake_timeout", "shutdown_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

        if self.read_retry_delay < 0:
            raise ValueError(f"read_retry_delay must not be negative, got {self.read_retry_delay}")

        if self.read_chunk_size <= 0:
            raise ValueError(f"read_chunk_size must be positive, got {self.read_chunk_size}")

    def setoption_commands(self) -> List[str]:
        """
        Build the setoption commands sent after uciok.

        Returns:
            Commands in the order they should be written
        """
        options = [
            ("Threads", str(self.threads)),
            ("Hash", str(self.hash_mb)),
            ("Ponder", "true" if self.ponder else "false"),
            ("Skill Level", str(self.skill_level)),
        ]
        options.extend(self.extra_options.items())
        return [f"setoption name {name} value {value}" for name, value in options]

    def __repr__(self) -> str:
        """String representation of config."""
        return (
            f"EngineConfig(\n"
            f"  Engine: {self.engine_path}\n"
            f"  Options: threads={self.threads}, hash={self.hash_mb}MB, "
            f"ponder={self.ponder}, skill={self.skill_level}\n"
            f"  Timeouts: ready={self.ready_timeout}s, handshake={self.handshake_timeout}s\n"
            f")"
        )
