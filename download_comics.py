#!/usr/bin/env python3
"""
Daily Comics Downloader (canonical runner)

This script fetches today's strip for each requested comic, finds the strip
image on the publisher's page (or JSON feed), downloads it and saves it with
an extension taken from the image's file signature.

Usage notes:
- Pick comics with `-c`, repeatable: `download_comics.py -c calvin -c xkcd`.
- Output goes to `-d <directory>` (default: `~/Pictures/Comics`) as
    `<comic>-<YYYY-MM-DD>.<ext>`. Re-running overwrites the previous file.
- With no `-c` flags nothing is dispatched and the script exits immediately.

Configuration note:
- The downloader reads an optional `comics_config.json` next to this file (or
    the file passed with `--config`) for defaults: output directory, worker
    counts, request timeout, file permissions and extra source definitions.
    CLI flags take precedence over the config file.

Key features:
- All requested comics are fetched concurrently; one comic failing never
    stops the others.
- Two topologies: `fanout` (one worker per comic running fetch then
    download) and `pipeline` (bounded queues between a pool of fetch workers
    and a pool of download workers).
- Exactly one outcome is reported per requested comic. The exit status is 0
    when every comic succeeded and 1 otherwise.
"""

import argparse
import logging
import queue
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter

from comics_lib.config import (
    DEFAULT_DIRECTORY,
    DEFAULT_DOWNLOAD_WORKERS,
    DEFAULT_FETCH_WORKERS,
    DEFAULT_MODE,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_TIMEOUT,
    MODES,
    load_config,
    parse_file_mode,
)
from comics_lib.download import download_strip
from comics_lib.errors import ComicsError, ConfigError
from comics_lib.fetch import fetch_strip_url
from comics_lib.models import DownloadJob, FetchTask, Outcome
from comics_lib.sources import load_sources
from utils.filenames import clean_comic_id, output_prefix


class ComicsDownloader:
    """Coordinates fetching and downloading for a batch of comics"""

    def __init__(self, download_dir: Optional[str] = None, comics: Optional[List[str]] = None,
                 reference_date: Optional[date] = None, mode: Optional[str] = None,
                 timeout: Optional[float] = None, fetch_workers: Optional[int] = None,
                 download_workers: Optional[int] = None, queue_size: Optional[int] = None,
                 file_mode: Optional[int] = None, config: Optional[Dict] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize the downloader

        Args:
            download_dir: Directory to save strips into
            comics: Comic ids to fetch (must be registered sources)
            reference_date: Date whose strip is wanted (default: today)
            mode: 'fanout' or 'pipeline'
            config: Parsed config mapping; loaded from comics_config.json when None

        Explicit arguments win over the config file, which wins over defaults.
        Raises ConfigError for unknown comics or invalid settings.
        """
        cfg = load_config() if config is None else config
        defaults = cfg.get('defaults', {})
        net = cfg.get('network', {})

        self.download_dir = Path(download_dir or defaults.get('directory') or DEFAULT_DIRECTORY).expanduser()
        self.download_dir.mkdir(parents=True, exist_ok=True)
        self.reference_date = reference_date or date.today()

        self.mode = mode or defaults.get('mode') or DEFAULT_MODE
        if self.mode not in MODES:
            raise ConfigError(f"Unknown mode {self.mode!r} (expected one of {MODES})")

        try:
            self.timeout = float(timeout if timeout is not None else net.get('timeout', DEFAULT_TIMEOUT))
            self.fetch_workers = max(1, int(fetch_workers or net.get('fetch_workers', DEFAULT_FETCH_WORKERS)))
            self.download_workers = max(1, int(download_workers or net.get('download_workers', DEFAULT_DOWNLOAD_WORKERS)))
            self.queue_size = max(1, int(queue_size or net.get('queue_size', DEFAULT_QUEUE_SIZE)))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid network setting: {e}")
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout:g}")
        self.file_mode = file_mode if file_mode is not None else parse_file_mode(defaults.get('file_mode'))

        # Set up a per-download-directory logger to capture detailed events
        self.logger = logging.getLogger(f'ComicsDownloader:{self.download_dir}')
        try:
            if not self.logger.handlers:
                log_path = self.download_dir / 'comics_downloader.log'
                handler = RotatingFileHandler(str(log_path), maxBytes=1024 * 1024, backupCount=3, encoding='utf-8')
                handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(threadName)s %(message)s'))
                self.logger.addHandler(handler)
                self.logger.setLevel(logging.INFO)
        except OSError:
            # Logging should never block downloader operation
            pass

        self.sources = load_sources(cfg.get('sources'), logger=self.logger)

        # Collapse duplicates so two workers never write the same file
        self.comics = []
        for comic in comics or []:
            comic_id = clean_comic_id(comic)
            if comic_id not in self.sources:
                raise ConfigError(f"Not a valid comic for downloading: {comic!r} (choose from {', '.join(sorted(self.sources))})")
            if comic_id not in self.comics:
                self.comics.append(comic_id)

        if session is None:
            session = requests.Session()
            pool = max(self.fetch_workers + self.download_workers, len(self.comics), 1)
            adapter = HTTPAdapter(pool_connections=pool, pool_maxsize=pool)
            session.mount('http://', adapter)
            session.mount('https://', adapter)
        self.session = session

    def build_tasks(self) -> List[FetchTask]:
        """Create one FetchTask per requested comic."""
        return [
            FetchTask(comic=comic, reference_date=self.reference_date,
                      output_prefix=output_prefix(self.download_dir, comic, self.reference_date))
            for comic in self.comics
        ]

    def fetch_comic(self, task: FetchTask) -> DownloadJob:
        """Resolve the strip image for one task. Raises ComicsError on failure."""
        source = self.sources[task.comic]
        image_url = fetch_strip_url(self.session, source, task.reference_date,
                                    timeout=self.timeout, logger=self.logger)
        return DownloadJob(comic=task.comic, image_url=image_url, output_prefix=task.output_prefix)

    def download_strip(self, job: DownloadJob) -> Path:
        """Download one resolved strip. Raises ComicsError on failure."""
        return download_strip(self.session, job.image_url, job.output_prefix,
                              timeout=self.timeout, file_mode=self.file_mode, logger=self.logger)

    def _report(self, message: str):
        """Print a progress line; a console that cannot take it never fails a comic."""
        try:
            print(message)
        except (OSError, UnicodeError) as e:
            self.logger.debug(f"Could not print progress line ({type(e).__name__}): {message!r}")

    def _failure(self, comic: str, stage: str, error: Exception, image_url: Optional[str] = None) -> Outcome:
        if isinstance(error, ComicsError):
            reason = f"{type(error).__name__}: {error}"
            self.logger.error(f"{comic}: {stage} failed: {reason}")
        else:
            reason = f"unexpected {type(error).__name__}: {error}"
            self.logger.error(f"{comic}: {stage} failed with {reason}", exc_info=error)
        self._report(f"  ✗ {comic}: {stage} failed ({reason})")
        return Outcome(comic=comic, success=False, stage=stage, error=reason, image_url=image_url)

    def _fetch_job(self, task: FetchTask):
        """Run the fetch stage: a DownloadJob on success, a failed Outcome otherwise."""
        try:
            self._report(f"  📡 {task.comic}: fetching strip for {task.reference_date.isoformat()}...")
            return self.fetch_comic(task)
        except Exception as e:
            return self._failure(task.comic, 'fetch', e)

    def _download_outcome(self, job: DownloadJob) -> Outcome:
        try:
            path = self.download_strip(job)
        except Exception as e:
            return self._failure(job.comic, 'download', e, image_url=job.image_url)
        self._report(f"  ✅ {job.comic}: saved {path.name}")
        return Outcome(comic=job.comic, success=True, path=path, image_url=job.image_url)

    def process_comic(self, task: FetchTask) -> Outcome:
        """Fetch then download a single comic, always returning an Outcome."""
        result = self._fetch_job(task)
        if isinstance(result, Outcome):
            return result
        return self._download_outcome(result)

    def run_fanout(self, tasks: List[FetchTask]) -> List[Outcome]:
        """Run one worker per comic and wait for every outcome."""
        outcomes = []
        if not tasks:
            return outcomes
        with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix='comic') as ex:
            futs = {ex.submit(self.process_comic, task): task for task in tasks}
            for fut in as_completed(futs):
                try:
                    outcomes.append(fut.result())
                except Exception as e:
                    outcomes.append(self._failure(futs[fut].comic, 'fetch', e))
        return outcomes

    def run_pipeline(self, tasks: List[FetchTask]) -> List[Outcome]:
        """Stream tasks through bounded fetch and download stages.

        Fetch workers stop when the task queue is exhausted (one None sentinel
        each). Download workers get their sentinels only after every fetch
        worker has exited, so every produced DownloadJob is drained. Every
        dequeued task or job puts exactly one Outcome or DownloadJob, even if
        reporting fails.
        """
        task_q = queue.Queue(maxsize=self.queue_size)
        job_q = queue.Queue(maxsize=self.queue_size)
        outcome_q = queue.Queue()
        n_fetch = min(self.fetch_workers, max(len(tasks), 1))
        n_download = min(self.download_workers, max(len(tasks), 1))

        def producer():
            try:
                for task in tasks:
                    task_q.put(task)
            finally:
                for _ in range(n_fetch):
                    task_q.put(None)

        def fetch_worker():
            while True:
                task = task_q.get()
                if task is None:
                    break
                try:
                    result = self._fetch_job(task)
                except Exception as e:
                    result = Outcome(comic=task.comic, success=False, stage='fetch',
                                     error=f"unexpected {type(e).__name__}: {e}")
                if isinstance(result, Outcome):
                    outcome_q.put(result)
                else:
                    job_q.put(result)

        def download_worker():
            while True:
                job = job_q.get()
                if job is None:
                    break
                try:
                    outcome = self._download_outcome(job)
                except Exception as e:
                    outcome = Outcome(comic=job.comic, success=False, stage='download',
                                      error=f"unexpected {type(e).__name__}: {e}", image_url=job.image_url)
                outcome_q.put(outcome)

        producer_thread = threading.Thread(target=producer, name='comic-producer', daemon=True)
        fetchers = [threading.Thread(target=fetch_worker, name=f'comic-fetch-{i}', daemon=True) for i in range(n_fetch)]
        downloaders = [threading.Thread(target=download_worker, name=f'comic-download-{i}', daemon=True) for i in range(n_download)]
        for t in [producer_thread] + fetchers + downloaders:
            t.start()

        producer_thread.join()
        for t in fetchers:
            t.join()
        for _ in downloaders:
            job_q.put(None)
        for t in downloaders:
            t.join()

        outcomes = []
        while not outcome_q.empty():
            outcomes.append(outcome_q.get_nowait())
        return outcomes

    def download_all_comics(self) -> List[Outcome]:
        """Main method: fetch and download every requested comic"""
        tasks = self.build_tasks()
        self._report("=" * 80)
        self._report("Daily Comics Downloader")
        self._report("=" * 80)
        self._report(f"\nComics: {', '.join(self.comics) or '(none)'}")
        self._report(f"Date: {self.reference_date.isoformat()}")
        self._report(f"Download directory: {self.download_dir}")
        self._report(f"Mode: {self.mode}\n")
        self.logger.info(f"Starting {self.mode} run for {len(tasks)} comic(s): {', '.join(self.comics)}")

        start = time.perf_counter()
        if self.mode == 'pipeline':
            outcomes = self.run_pipeline(tasks)
        else:
            outcomes = self.run_fanout(tasks)
        elapsed = time.perf_counter() - start

        if len(outcomes) != len(tasks):
            # Should be impossible: every task path ends in exactly one Outcome
            raise RuntimeError(f"Expected {len(tasks)} outcomes, got {len(outcomes)}")

        failed = [o for o in outcomes if not o.success]
        self._report(f"\nFinished in {elapsed:.2f}s: {len(outcomes) - len(failed)}/{len(outcomes)} succeeded")
        for o in failed:
            self._report(f"  ⚠️  {o.comic} ({o.stage}): {o.error}")
        self.logger.info(f"Finished in {elapsed:.2f}s ({len(outcomes) - len(failed)}/{len(outcomes)} succeeded, {len(failed)} failed)")
        return outcomes


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (expected YYYY-MM-DD)")


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Download today's strips for the selected comics")
    parser.add_argument('-d', '--directory', help=f'Directory to save comics into (default: {DEFAULT_DIRECTORY})')
    parser.add_argument('-c', '--comic', action='append', default=[], dest='comics',
                        help='Comic to download (repeatable), e.g. calvin, dilbert, xkcd')
    parser.add_argument('--date', type=parse_date, help='Reference date as YYYY-MM-DD (default: today)')
    parser.add_argument('--mode', choices=MODES, help='fanout: one worker per comic; pipeline: fetch/download worker pools')
    parser.add_argument('--timeout', type=float, help='Per-request timeout in seconds')
    parser.add_argument('--workers', type=int, help='Worker count for each pipeline stage')
    parser.add_argument('--config', help='Path to a comics_config.json file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log progress to the console')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(message)s',
    )

    if not args.comics:
        print("No comics requested (use -c <comic>); nothing to do.")
        return 0

    if args.config and not Path(args.config).is_file():
        parser.error(f"config file not found: {args.config}")

    try:
        config = load_config(args.config) if args.config else None
        downloader = ComicsDownloader(
            download_dir=args.directory,
            comics=args.comics,
            reference_date=args.date,
            mode=args.mode,
            timeout=args.timeout,
            fetch_workers=args.workers,
            download_workers=args.workers,
            config=config,
        )
    except (ConfigError, OSError) as e:
        parser.error(str(e))

    try:
        outcomes = downloader.download_all_comics()
    except KeyboardInterrupt:
        print("\n\n⏸️  Download interrupted by user.")
        return 130
    return 0 if all(o.success for o in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
