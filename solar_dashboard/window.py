"""Desktop window for the solar cleaner dashboard.

Built on :mod:`tkinter` (stdlib) so that no additional GUI dependencies
are required.  Tk owns the main thread; all network calls run on an
asyncio loop in a background thread and their completions are handed
back to Tk through a queue that the window drains with ``after()``.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import queue
import threading
import webbrowser
from typing import Any, Callable, Coroutine

from .batch_viewer import EMPTY_MESSAGE as NO_BATCHES
from .batch_viewer import BatchViewer
from .communication import RestClient
from .config import DashboardConfig
from .control_panel import ControlPanel, format_event_time
from .schedule_editor import EMPTY_MESSAGE as NO_SCHEDULE
from .schedule_editor import ScheduleEditor

log = logging.getLogger(__name__)

# tkinter is part of the stdlib but may not be installed on every system.
try:
    import tkinter as tk
    from tkinter import ttk

    _HAS_TK = True
except ImportError:  # pragma: no cover
    _HAS_TK = False
    log.warning("tkinter is not available -- the dashboard window is disabled.")

# -- constants ---------------------------------------------------------------

_BG = "#111827"
_PANEL_BG = "#1f2937"
_TEXT_FG = "#ffffff"
_MUTED_FG = "#9ca3af"
_ON_FG = "#22c55e"
_OFF_FG = "#ef4444"
_ACTIVE_FG = "#3b82f6"
_LINK_FG = "#22d3ee"
_POLL_MS = 50


class AsyncRunner:
    """Runs an asyncio event loop in a daemon thread."""

    def __init__(self) -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="solar-dashboard-io",
        )

    def start(self) -> None:
        self._thread.start()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def stop(self) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=2.0)

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()
        self.loop.close()


class DashboardWindow:
    """Tkinter window with the control panel, batch viewer and schedule dialog.

    Parameters
    ----------
    config:
        The dashboard configuration.
    runner:
        The background loop that executes REST calls.
    """

    def __init__(self, config: DashboardConfig, runner: AsyncRunner) -> None:
        self._config = config
        self._runner = runner
        self._client = RestClient(config)
        self.panel = ControlPanel(self._client, config)
        self.viewer = BatchViewer(self._client, config)
        self._done: queue.Queue[tuple[concurrent.futures.Future, Callable[[], None]]] = queue.Queue()
        self._root: tk.Tk | None = None
        self._schedule_dialog: ScheduleDialog | None = None

    # -- public API -----------------------------------------------------------

    def run(self) -> None:
        """Build the window and block in the Tk main loop."""
        if not _HAS_TK:
            log.error("Cannot open the dashboard -- tkinter unavailable.")
            return

        root = tk.Tk()
        self._root = root
        root.title("Solar Cleaner")
        root.configure(bg=_BG)
        root.geometry("720x860")
        root.protocol("WM_DELETE_WINDOW", self.close)

        tk.Label(
            root, text="Solar Cleaner", font=("Segoe UI", 20, "bold"),
            fg=_TEXT_FG, bg=_PANEL_BG, anchor=tk.W, padx=16, pady=12,
        ).pack(fill=tk.X)

        body = tk.Frame(root, bg=_BG)
        body.pack(fill=tk.BOTH, expand=True, padx=16, pady=12)
        self._build_control(body)
        self._build_summary(body)
        self._build_viewer(body)
        self._render_control()
        self._render_viewer()

        self.call(self.panel.load(), self._render_control)
        self.call(self.viewer.load(), self._render_viewer)
        root.after(_POLL_MS, self._drain)

        try:
            root.mainloop()
        finally:
            self._root = None

    def close(self) -> None:
        log.info("Dashboard window closing")
        future = self._runner.submit(self._client.close())
        try:
            future.result(timeout=2.0)
        except Exception:
            log.debug("Ignoring error while closing REST client", exc_info=True)
        if self._root is not None:
            self._root.destroy()

    def call(self, coro: Coroutine[Any, Any, Any], then: Callable[[], None]) -> None:
        """Run *coro* on the IO loop, then *then* on the Tk thread."""
        future = self._runner.submit(coro)
        future.add_done_callback(lambda f: self._done.put((f, then)))

    # -- internal -------------------------------------------------------------

    def _drain(self) -> None:
        while True:
            try:
                future, then = self._done.get_nowait()
            except queue.Empty:
                break
            exc = future.exception()
            if exc is not None:
                log.error("Dashboard action failed", exc_info=exc)
            then()
        if self._root is not None:
            self._root.after(_POLL_MS, self._drain)

    def _panel(self, parent: tk.Widget, title: str) -> tk.Frame:
        frame = tk.Frame(parent, bg=_PANEL_BG, padx=12, pady=10)
        frame.pack(fill=tk.X, pady=(0, 10))
        tk.Label(
            frame, text=title, font=("Segoe UI", 13, "bold"),
            fg=_TEXT_FG, bg=_PANEL_BG,
        ).pack(anchor=tk.W)
        return frame

    # -- control panel --------------------------------------------------------

    def _build_control(self, parent: tk.Widget) -> None:
        frame = self._panel(parent, "Cleaner Control")

        row = tk.Frame(frame, bg=_PANEL_BG)
        row.pack(fill=tk.X, pady=4)
        self._power_label = tk.Label(row, bg=_PANEL_BG, font=("Segoe UI", 11))
        self._power_label.pack(side=tk.LEFT)
        self._power_button = tk.Button(
            row, relief=tk.FLAT, padx=12,
            command=lambda: self.call(self.panel.toggle_cleaner(), self._render_control),
        )
        self._power_button.pack(side=tk.RIGHT)

        row = tk.Frame(frame, bg=_PANEL_BG)
        row.pack(fill=tk.X, pady=4)
        self._active_label = tk.Label(row, bg=_PANEL_BG, font=("Segoe UI", 11))
        self._active_label.pack(side=tk.LEFT)
        self._active_button = tk.Button(
            row, relief=tk.FLAT, padx=12,
            command=lambda: self.call(self.panel.toggle_active(), self._render_control),
        )
        self._active_button.pack(side=tk.RIGHT)

        tk.Label(
            frame, text="Recent Activity", fg=_MUTED_FG, bg=_PANEL_BG,
        ).pack(anchor=tk.W, pady=(8, 2))
        self._history_row = tk.Frame(frame, bg=_PANEL_BG)
        self._history_row.pack(fill=tk.X)
        self._control_error = tk.Label(frame, fg=_OFF_FG, bg=_PANEL_BG)
        self._control_error.pack(anchor=tk.W)

    def _render_control(self) -> None:
        panel = self.panel
        on = panel.status.is_cleaner_on
        active = panel.status.is_active
        self._power_label.configure(
            text=f"Status: {panel.power_label}", fg=_ON_FG if on else _OFF_FG,
        )
        self._power_button.configure(
            text=panel.power_action_label, bg=_OFF_FG if on else _ON_FG, fg=_TEXT_FG,
        )
        self._active_label.configure(
            text=f"Active Status: {panel.active_label}",
            fg=_ACTIVE_FG if active else _MUTED_FG,
        )
        self._active_button.configure(
            text=panel.active_action_label,
            bg=_MUTED_FG if active else _ACTIVE_FG, fg=_TEXT_FG,
        )

        for child in self._history_row.winfo_children():
            child.destroy()
        for event in panel.status.on_off_history:
            tk.Label(
                self._history_row,
                text=f"⏻ {format_event_time(event)}",
                fg=_ON_FG if event.state else _OFF_FG,
                bg=_PANEL_BG,
            ).pack(side=tk.LEFT, expand=True)

        self._last_cleaning.configure(text=panel.status.last_cleaning_time)
        self._images_captured.configure(text=str(panel.status.images_captured))
        self._control_error.configure(
            text="Loading..." if panel.is_loading else (panel.error or ""),
        )

    # -- last cleaning / images captured -------------------------------------

    def _build_summary(self, parent: tk.Widget) -> None:
        frame = self._panel(parent, "Last Cleaning")
        self._last_cleaning = tk.Label(frame, fg=_MUTED_FG, bg=_PANEL_BG)
        self._last_cleaning.pack(anchor=tk.W)
        tk.Button(
            frame, text="View schedule", fg=_LINK_FG, bg=_PANEL_BG, relief=tk.FLAT,
            command=self._open_schedule,
        ).pack(fill=tk.X, pady=(6, 0))

        frame = self._panel(parent, "Images Captured")
        self._images_captured = tk.Label(frame, fg=_MUTED_FG, bg=_PANEL_BG)
        self._images_captured.pack(anchor=tk.W)

    def _open_schedule(self) -> None:
        if self._schedule_dialog is not None and self._schedule_dialog.is_open:
            return
        self._schedule_dialog = ScheduleDialog(self, ScheduleEditor(self._client))
        self._schedule_dialog.show(self._root)

    # -- ML output viewer -----------------------------------------------------

    def _build_viewer(self, parent: tk.Widget) -> None:
        frame = self._panel(parent, "ML Output Viewer")

        self._search_var = tk.StringVar()
        search = tk.Entry(frame, textvariable=self._search_var, bg="#374151", fg=_TEXT_FG)
        search.pack(fill=tk.X, pady=6)
        search.bind(
            "<Return>",
            lambda _e: self.call(self.viewer.search(self._search_var.get()), self._render_viewer),
        )

        self._batch_table = ttk.Treeview(
            frame, columns=("name", "date", "damages"), show="headings", height=5,
        )
        for col, title in (("name", "Batch"), ("date", "Date"), ("damages", "Damages")):
            self._batch_table.heading(col, text=title)
        self._batch_table.pack(fill=tk.X)
        self._batch_table.bind("<<TreeviewSelect>>", self._on_batch_selected)

        nav = tk.Frame(frame, bg=_PANEL_BG)
        nav.pack(fill=tk.X, pady=6)
        self._showing = tk.Label(nav, fg=_MUTED_FG, bg=_PANEL_BG)
        self._showing.pack(side=tk.LEFT)
        self._next_button = tk.Button(
            nav, text="›", relief=tk.FLAT,
            command=lambda: self.call(self.viewer.next_page(), self._render_viewer),
        )
        self._next_button.pack(side=tk.RIGHT)
        self._prev_button = tk.Button(
            nav, text="‹", relief=tk.FLAT,
            command=lambda: self.call(self.viewer.previous_page(), self._render_viewer),
        )
        self._prev_button.pack(side=tk.RIGHT)

        self._details = tk.Frame(frame, bg=_PANEL_BG)
        self._details.pack(fill=tk.X)

    def _render_viewer(self) -> None:
        viewer = self.viewer
        self._batch_table.delete(*self._batch_table.get_children())

        if viewer.is_loading:
            self._showing.configure(text="Loading...", fg=_MUTED_FG)
            return
        if viewer.error:
            self._showing.configure(text=viewer.error, fg=_OFF_FG)
            return

        for batch in viewer.batches:
            self._batch_table.insert(
                "", tk.END, iid=batch.id,
                values=(batch.name, batch.date, batch.damage_count),
            )

        if viewer.show_pagination:
            first, last, total = viewer.showing_range()
            self._showing.configure(
                text=f"Showing {first} to {last} of {total} results", fg=_MUTED_FG,
            )
        else:
            self._showing.configure(text=NO_BATCHES, fg=_MUTED_FG)
        self._prev_button.configure(state=tk.NORMAL if viewer.has_previous else tk.DISABLED)
        self._next_button.configure(state=tk.NORMAL if viewer.has_next else tk.DISABLED)
        self._render_details()

    def _on_batch_selected(self, _event: Any) -> None:
        selection = self._batch_table.selection()
        if not selection:
            return
        batch = next((b for b in self.viewer.batches if b.id == selection[0]), None)
        self.viewer.select_batch(batch)
        self._render_details()

    def _render_details(self) -> None:
        for child in self._details.winfo_children():
            child.destroy()
        batch = self.viewer.selected_batch
        if batch is None:
            return

        tk.Label(
            self._details, text=f"{batch.name} Details",
            font=("Segoe UI", 12, "bold"), fg=_TEXT_FG, bg=_PANEL_BG,
        ).pack(anchor=tk.W, pady=(8, 0))
        tk.Label(
            self._details,
            text=f"Date: {batch.date} | Total Damages Detected: {batch.damage_count}",
            fg=_MUTED_FG, bg=_PANEL_BG,
        ).pack(anchor=tk.W)

        for image in batch.images:
            selected = self.viewer.selected_image is not None and self.viewer.selected_image.id == image.id
            tk.Button(
                self._details,
                text=f"{'▸ ' if selected else ''}{image.url}  (Damages: {image.damage_count})",
                fg=_LINK_FG, bg=_PANEL_BG, relief=tk.FLAT, anchor=tk.W,
                command=lambda img=image: self._on_image_selected(img),
            ).pack(fill=tk.X)

    def _on_image_selected(self, image: Any) -> None:
        self.viewer.select_image(image)
        self._render_details()
        log.info("Opening image %s", image.url)
        try:
            webbrowser.open(image.url)
        except Exception:
            log.exception("Failed to open browser for %s", image.url)


class ScheduleDialog:
    """Modal window for the cleaning schedule."""

    def __init__(self, window: DashboardWindow, editor: ScheduleEditor) -> None:
        self._window = window
        self.editor = editor
        self._top: tk.Toplevel | None = None

    @property
    def is_open(self) -> bool:
        return self._top is not None

    def show(self, parent: tk.Tk | None) -> None:
        top = tk.Toplevel(parent)
        self._top = top
        top.title("Cleaning Schedule")
        top.configure(bg=_PANEL_BG, padx=16, pady=12)
        top.transient(parent)
        top.grab_set()
        top.protocol("WM_DELETE_WINDOW", self.close)

        self._rows = tk.Frame(top, bg=_PANEL_BG)
        self._rows.pack(fill=tk.X)
        self._error = tk.Label(top, fg=_OFF_FG, bg=_PANEL_BG)
        self._error.pack(fill=tk.X)

        form = tk.Frame(top, bg=_PANEL_BG)
        form.pack(fill=tk.X, pady=8)
        self._new_day = tk.StringVar(value=self.editor.new_day)
        ttk.Combobox(
            form, textvariable=self._new_day, values=self.editor.days_of_week,
            state="readonly", width=12,
        ).pack(side=tk.LEFT)
        self._new_time = tk.StringVar(value=self.editor.new_time)
        tk.Entry(form, textvariable=self._new_time, width=8).pack(side=tk.LEFT, padx=6)
        tk.Button(form, text="Add", command=self._add).pack(side=tk.LEFT)

        tk.Button(top, text="Close", command=self.close).pack(fill=tk.X)

        self._render()
        self._window.call(self.editor.load(), self._render)

    def close(self) -> None:
        if self._top is not None:
            self._top.grab_release()
            self._top.destroy()
            self._top = None

    # -- actions --------------------------------------------------------------

    def _add(self) -> None:
        self.editor.new_day = self._new_day.get()
        self.editor.new_time = self._new_time.get().strip()
        self._window.call(self.editor.add(), self._render)

    def _save(self, day: tk.StringVar, time: tk.StringVar) -> None:
        self.editor.edit_day = day.get()
        self.editor.edit_time = time.get().strip()
        self._window.call(self.editor.save_edit(), self._render)

    def _edit(self, index: int) -> None:
        self.editor.start_editing(index)
        self._render()

    def _delete(self, index: int) -> None:
        self._window.call(self.editor.delete(index), self._render)

    # -- rendering ------------------------------------------------------------

    def _render(self) -> None:
        if self._top is None:
            return
        editor = self.editor
        for child in self._rows.winfo_children():
            child.destroy()

        if editor.is_loading:
            tk.Label(self._rows, text="Loading Schedule...", fg=_TEXT_FG, bg=_PANEL_BG).pack()
            return

        self._error.configure(text=editor.error or "")
        if not editor.entries:
            tk.Label(self._rows, text=NO_SCHEDULE, fg=_MUTED_FG, bg=_PANEL_BG).pack()

        for index, entry in enumerate(editor.entries):
            row = tk.Frame(self._rows, bg=_PANEL_BG)
            row.pack(fill=tk.X, pady=2)
            if editor.editing_index == index:
                day = tk.StringVar(value=editor.edit_day)
                time = tk.StringVar(value=editor.edit_time)
                ttk.Combobox(
                    row, textvariable=day, values=editor.days_of_week,
                    state="readonly", width=12,
                ).pack(side=tk.LEFT)
                tk.Entry(row, textvariable=time, width=8).pack(side=tk.LEFT, padx=6)
                tk.Button(
                    row, text="✓", fg=_ON_FG,
                    command=lambda d=day, t=time: self._save(d, t),
                ).pack(side=tk.RIGHT)
            else:
                tk.Label(row, text=entry.day.value, width=12, anchor=tk.W, fg=_TEXT_FG, bg=_PANEL_BG).pack(side=tk.LEFT)
                tk.Label(row, text=entry.time, fg=_MUTED_FG, bg=_PANEL_BG).pack(side=tk.LEFT, padx=6)
                tk.Button(
                    row, text="×", fg=_OFF_FG,
                    command=lambda i=index: self._delete(i),
                ).pack(side=tk.RIGHT)
                tk.Button(
                    row, text="✎", fg=_ACTIVE_FG,
                    command=lambda i=index: self._edit(i),
                ).pack(side=tk.RIGHT, padx=4)

        self._new_day.set(editor.new_day)
        self._new_time.set(editor.new_time)
