"""
LaTeX Compilation Module

Runs pdflatex against a single source file inside a job-owned temporary output
directory, rerunning the engine while it asks for another pass to settle
cross-references, and resolves compiled artifacts asynchronously.
"""

import asyncio
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Iterator, List, Optional, TextIO, Tuple, Union

from dotenv import load_dotenv

from texjob.contexts.rendering.arguments import CompilationArguments
from texjob.contexts.rendering.logger import (
    _log_debug,
    _log_exception,
    _log_info,
    _log_warning,
    log_attempt_result,
    log_attempt_start,
    log_compilation_result,
)

load_dotenv()

LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")

# Printed by LaTeX when labels changed since the previous pass
RERUN_MARKER = "Rerun to get cross-references right."


class FileExtension(Enum):
    """Compiled artifacts that can be requested from a job."""

    PDF = "pdf"
    AUX = "aux"
    LOG = "log"
    TOC = "toc"

    @classmethod
    def coerce(cls, extension: Union["FileExtension", str]) -> "FileExtension":
        """Accept an enum member or a case-insensitive name such as "PDF" or ".toc"."""
        if isinstance(extension, cls):
            return extension
        try:
            return cls(str(extension).lower().lstrip("."))
        except ValueError:
            available = [member.value for member in cls]
            raise ValueError(
                f"Unsupported file extension '{extension}'. Available extensions: {available}"
            ) from None


@dataclass
class ProcessOutput:
    """
    Captured result of one engine invocation.

    Attributes:
        returncode: Process exit code (0 means the engine finished cleanly)
        stdout: Raw standard output
        stderr: Raw standard error
    """

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    def text(self, stderr: bool = False) -> str:
        data = self.stderr if stderr else self.stdout
        # pdflatex output mixes encodings (font names, file paths)
        return data.decode("utf-8", errors="replace")

    def lines(self) -> Iterator[str]:
        """Iterate over standard output line by line."""
        return iter(self.text().splitlines())


Launcher = Callable[[List[str], Path, Path], Awaitable[ProcessOutput]]


async def run_process(command: List[str], stdin_path: Path, cwd: Path) -> ProcessOutput:
    """
    Run the engine with stdin redirected from a file and wait for it to exit.

    Raises:
        OSError: If the process cannot be started (e.g. binary not on PATH)
    """
    with open(stdin_path, "rb") as stdin:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=stdin,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
        )
        try:
            stdout, stderr = await process.communicate()
        except BaseException:
            # Interrupted (e.g. cancelled): the engine must not keep writing into the job directory
            if process.returncode is None:
                process.kill()
            await process.wait()
            raise

    return ProcessOutput(returncode=process.returncode, stdout=stdout, stderr=stderr)


def requires_rerun(lines: Iterable[str]) -> bool:
    """Check engine output for the cross-reference rerun request."""
    return any(RERUN_MARKER in line for line in lines)


class LatexCompiler:
    """
    A single LaTeX compilation job.

    Owns a temporary output directory for the lifetime of the object. Call
    close() (or use the object as a context manager) to delete it; nothing is
    removed on garbage collection.

    Compilation is lazy and memoized: the first get_file()/get_pdf()/compile()
    call schedules a compilation task, later calls reuse it until an argument
    is added or removed.

    Example:
        async def build():
            with LatexCompiler.from_file(Path("report.tex")) as compiler:
                compiler.add_argument("-interaction", "nonstopmode")
                pdf = await compiler.get_pdf()
                if pdf is not None:
                    shutil.copy(pdf, "report.pdf")
    """

    OUTPUTDIR_PARAMETER = "-output-directory"
    JOBNAME_PARAMETER = "-jobname"
    DEFAULT_JOBNAME = "texput"
    SOURCE_FILENAME = "source.tex"
    TEMP_PREFIX = "LatexCompiler"
    MAX_RETRY = 2

    def __init__(
        self,
        tex_file: Path,
        source_directory: Optional[Path] = None,
        temp_path: Optional[Path] = None,
        launcher: Optional[Launcher] = None,
        binary: Optional[str] = None,
    ):
        """
        Prefer from_file() or from_template().

        Args:
            tex_file: TeX source, fed to the engine on stdin
            source_directory: Engine working directory, where dependent files
                (images, styles) are looked up. Defaults to tex_file's directory
            temp_path: Existing output directory to take ownership of.
                A fresh temporary directory is created when omitted
            launcher: Async process launcher (defaults to run_process)
            binary: Engine executable (defaults to LATEX_COMPILER env or "pdflatex")
        """
        self.tex_file = Path(tex_file)
        self.source_directory = Path(source_directory) if source_directory else self.tex_file.parent
        self.temp_path = (
            Path(temp_path) if temp_path is not None else Path(tempfile.mkdtemp(prefix=self.TEMP_PREFIX))
        )
        self.binary = binary or LATEX_COMPILER
        self.arguments = CompilationArguments({self.OUTPUTDIR_PARAMETER: str(self.temp_path)})
        # Never reset: once exhausted, later compilations of this job get no reruns
        self.retry_count = 0

        self._launcher = launcher or run_process
        self._compilation: Optional[Tuple[int, "asyncio.Task[bool]"]] = None
        self._closed = False

    @classmethod
    def from_file(cls, tex_file: Path, **kwargs) -> "LatexCompiler":
        """
        Create a job for an existing TeX file.

        The engine runs in the file's directory so relative includes resolve.

        Raises:
            FileNotFoundError: If tex_file does not exist
        """
        tex_file = Path(tex_file).resolve()
        if not tex_file.is_file():
            raise FileNotFoundError(f"TeX file not found: {tex_file}")
        return cls(tex_file, source_directory=tex_file.parent, **kwargs)

    @classmethod
    def from_template(
        cls,
        template: Callable[[TextIO], None],
        source_directory: Optional[Path] = None,
        **kwargs,
    ) -> "LatexCompiler":
        """
        Create a job whose source is written by a callback.

        A fresh temporary directory is created, source.tex is opened inside it and
        passed to template(), and the file is closed once the callback returns.

        Args:
            template: Callback writing the TeX source to the given stream
            source_directory: Root directory to resolve TeX dependent files from
                (e.g. images). Defaults to the directory holding source.tex

        Raises:
            OSError: If the directory or file cannot be created or written.
            Anything raised by template() propagates unchanged. The temporary
            directory is removed before re-raising.
        """
        temp_path = Path(tempfile.mkdtemp(prefix=cls.TEMP_PREFIX))
        tex_file = temp_path / cls.SOURCE_FILENAME
        try:
            with open(tex_file, "w", encoding="utf-8") as writer:
                template(writer)
        except Exception:
            shutil.rmtree(temp_path, ignore_errors=True)
            raise

        return cls(
            tex_file,
            source_directory=Path(source_directory) if source_directory else temp_path,
            temp_path=temp_path,
            **kwargs,
        )

    def __enter__(self) -> "LatexCompiler":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Delete compilation files and the temporary directory. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        if not self.temp_path.exists():
            return

        for compiled_file in self.temp_path.iterdir():
            if compiled_file.is_dir() and not compiled_file.is_symlink():
                shutil.rmtree(compiled_file)
            else:
                compiled_file.unlink()
        self.temp_path.rmdir()
        _log_debug(f"Removed output directory {self.temp_path}")

    @property
    def closed(self) -> bool:
        return self._closed

    def add_argument(self, name: str, value: Optional[str] = None) -> "LatexCompiler":
        """
        Add an argument to the compilation process.

        Args:
            name: Argument name, using pdflatex CLI nomenclature (e.g. "-interaction")
            value: Argument value, or None for a bare flag

        Returns:
            The current LatexCompiler instance
        """
        self.arguments.set(name, value)
        return self

    def remove_argument(self, name: str) -> "LatexCompiler":
        """
        Remove an argument from the compilation process.

        Returns:
            The current LatexCompiler instance
        """
        self.arguments.remove(name)
        return self

    def command(self) -> List[str]:
        """Engine command line for the current arguments."""
        return [self.binary] + self.arguments.tokens()

    def compile(self) -> "asyncio.Task[bool]":
        """
        Return the compilation task for the current arguments, scheduling it if needed.

        Must be called with a running event loop. A task that was cancelled
        (e.g. by event loop shutdown) is replaced rather than reused.
        """
        generation = self.arguments.generation
        if (
            self._compilation is None
            or self._compilation[0] != generation
            or self._compilation[1].cancelled()
        ):
            loop = asyncio.get_running_loop()
            self._compilation = (generation, loop.create_task(self._compile()))
        return self._compilation[1]

    async def _compile(self) -> bool:
        start_time = time.time()
        attempt = 0
        success = False

        while True:
            attempt += 1
            command = self.command()
            log_attempt_start(attempt, command, self.tex_file, self.source_directory)

            pass_start = time.time()
            output = await self._launcher(command, self.tex_file, self.source_directory)
            log_attempt_result(attempt, output, time.time() - pass_start)

            if output.returncode != 0:
                break

            try:
                needs_rerun = requires_rerun(output.lines())
            except OSError:
                _log_exception("Could not read engine output")
                break

            if not needs_rerun:
                success = True
                break

            if self.retry_count >= self.MAX_RETRY:
                _log_warning(f"Cross-references still unresolved after {self.MAX_RETRY} reruns")
                break

            self.retry_count += 1
            _log_info(f"Rerun requested for cross-references ({self.retry_count}/{self.MAX_RETRY})")

        log_compilation_result(
            self.tex_file, success, attempt, time.time() - start_time, self.temp_path
        )
        return success

    def get_file(self, extension: Union[FileExtension, str]) -> Awaitable[Optional[Path]]:
        """
        Retrieve a file from the compilation results, compiling first if needed.

        The returned path is not checked for existence: an artifact the engine
        did not produce (e.g. a .toc for a document without a table of contents)
        still resolves to its would-be path when compilation succeeded.

        Args:
            extension: File extension to be retrieved

        Returns:
            Awaitable resolving to the requested file, or None if compilation failed
        """
        extension = FileExtension.coerce(extension)
        compilation = self.compile()

        jobname = self.arguments.setdefault(self.JOBNAME_PARAMETER, self.DEFAULT_JOBNAME)
        compiled_file = self.temp_path / f"{jobname}.{extension.value}"

        return self._resolve(compilation, compiled_file)

    def get_pdf(self) -> Awaitable[Optional[Path]]:
        """Retrieve the PDF file from the compilation results."""
        return self.get_file(FileExtension.PDF)

    @staticmethod
    async def _resolve(compilation: "asyncio.Task[bool]", compiled_file: Path) -> Optional[Path]:
        # Shielded: one caller giving up must not cancel the compilation other fetches share
        return compiled_file if await asyncio.shield(compilation) else None
