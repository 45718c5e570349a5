import logging
import queue
import threading

logger = logging.getLogger(__name__)


class DbWorker:
    """
    Runs database jobs on one background thread so the Tk loop never
    waits on the network. Results come back through a queue that the Tk
    thread drains with after(); callbacks therefore run on the UI thread.

    Jobs run strictly in submission order, one at a time.
    """

    def __init__(self, root=None, poll_ms=100):
        self.root = root
        self.poll_ms = poll_ms
        self.jobs = queue.Queue()
        self.results = queue.Queue()
        self._running = True
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        if root is not None:
            root.after(poll_ms, self._poll)

    @property
    def busy(self):
        return self.jobs.unfinished_tasks > 0

    def submit(self, func, *args, on_done=None, on_error=None):
        if not self._running:
            raise RuntimeError("Worker has been stopped")
        self.jobs.put((func, args, on_done, on_error))

    def _run(self):
        while True:
            job = self.jobs.get()
            if job is None:
                self.jobs.task_done()
                break
            func, args, on_done, on_error = job
            try:
                result = func(*args)
            except Exception as e:
                logger.exception(f"[DbWorker] Job {getattr(func, '__name__', func)} failed")
                self.results.put((on_error, e))
            else:
                self.results.put((on_done, result))
            finally:
                self.jobs.task_done()

    def process_results(self):
        """Dispatch finished jobs to their callbacks. Returns how many were handled."""
        handled = 0
        while True:
            try:
                callback, value = self.results.get_nowait()
            except queue.Empty:
                break
            handled += 1
            if callback is not None:
                callback(value)
            elif isinstance(value, Exception):
                logger.error(f"[process_results] Unhandled job error: {value}")
        return handled

    def _poll(self):
        try:
            self.process_results()
        finally:
            if self._running:
                self.root.after(self.poll_ms, self._poll)

    def wait(self, timeout=None):
        """Block until all submitted jobs finished (tests / shutdown)."""
        if timeout is None:
            self.jobs.join()
            return True
        done = threading.Event()

        def _join():
            self.jobs.join()
            done.set()
        threading.Thread(target=_join, daemon=True).start()
        return done.wait(timeout)

    def stop(self):
        if self._running:
            self._running = False
            self.jobs.put(None)
