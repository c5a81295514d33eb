"""
Geography 3-Mark Buddy - Tkinter (card-based) practice app

Flow:
1. Topic card: pick one of the seven Edexcel Spec A topics.
2. Practice card: a generated 3-mark question, the student writes an answer.
3. Marking: the answer is graded out of 3 and feedback is shown beside it.
4. Retry the same question, skip to a new one, or return to the topic menu.
5. Every graded attempt is listed in the collapsible history at the bottom.

Setup (from repo root):

    python -m venv .venv
    source .venv/bin/activate   # or .venv\\Scripts\\activate on Windows
    pip install -e .

Ensure .env contains:
    OPENAI_API_KEY=sk-...

Then run:
    python main.py
"""

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Dict, List, Optional

from core.api import AIClient, OpenAIClient
from core.config import Settings, load_settings
from core.errors import (
    ConfigurationError, GenerationError, GeoBuddyError, GradingError,
    SessionStateError, ValidationError,
)
from core.logger import force_utf8_output, logger
from core.models import Feedback, GeographyTopic, HistoryItem, Question
from core.schemas import CONNECTIVES, REASONING_STEPS
from core.session import PracticeSession
from core.worker import run_in_background

BACKGROUND = "#1e1e1e"
PANEL = "#2d2d2d"
TEXT = "#e0e0e0"
MUTED = "#9a9a9a"
ACCENT = "#69db7c"
BAND_COLORS = {"full": "#2f9e44", "partial": "#f59f00", "low": "#e03131"}


# ---------------------------------------------------------------------------
# Loading spinner
# ---------------------------------------------------------------------------

class LoadingSpinner(ttk.Frame):
    """A simple animated loading spinner widget for Tkinter."""

    def __init__(self, parent, text: str = "Loading...") -> None:
        super().__init__(parent)

        self.text = text
        self.spinner_chars = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
        self.spinner_index = 0
        self.is_running = False
        self._after_id = None

        self.label = ttk.Label(
            self,
            text=f"{self.spinner_chars[0]} {text}",
            font=("Helvetica", 14, "italic"),
            foreground=ACCENT,
        )
        self.label.pack(pady=20)

    def start(self, text: Optional[str] = None) -> None:
        if text:
            self.text = text
        if self.is_running:
            return
        self.is_running = True
        self._animate()

    def stop(self) -> None:
        self.is_running = False
        if self._after_id:
            self.after_cancel(self._after_id)
            self._after_id = None

    def _animate(self) -> None:
        if not self.is_running:
            return
        char = self.spinner_chars[self.spinner_index]
        self.label.configure(text=f"{char} {self.text}")
        self.spinner_index = (self.spinner_index + 1) % len(self.spinner_chars)
        self._after_id = self.after(100, self._animate)


# ---------------------------------------------------------------------------
# Main window / controller
# ---------------------------------------------------------------------------

class GeographyBuddyApp(tk.Tk):
    def __init__(self, client: AIClient, config_error: Optional[str] = None) -> None:
        super().__init__()
        logger.ui("Initializing GeographyBuddyApp window...")

        self.title("Geography 3-Mark Buddy")

        window_width = 1000
        window_height = 760
        screen_width = self.winfo_screenwidth()
        screen_height = self.winfo_screenheight()
        center_x = int(screen_width / 2 - window_width / 2)
        center_y = int(screen_height / 2 - window_height / 2)
        self.geometry(f"{window_width}x{window_height}+{center_x}+{center_y}")
        self.minsize(720, 560)

        self.configure(bg=BACKGROUND)
        style = ttk.Style()
        style.theme_use("clam")
        style.configure("TFrame", background=BACKGROUND)
        style.configure("Panel.TFrame", background=PANEL)
        style.configure("TLabel", background=BACKGROUND, foreground=TEXT, font=("Helvetica", 13))
        style.configure("Panel.TLabel", background=PANEL, foreground=TEXT, font=("Helvetica", 13))
        style.configure("TButton", background=PANEL, foreground=TEXT, font=("Helvetica", 13))
        style.map("TButton", background=[("active", "#3d3d3d"), ("disabled", "#252525")],
                  foreground=[("disabled", "#666666")])
        style.configure("Selected.TButton", background="#2b8a3e", foreground="#ffffff")
        style.map("Selected.TButton", background=[("active", "#37b24d"), ("pressed", "#2b8a3e")])
        style.configure("Start.TButton", font=("Helvetica", 14, "bold"), padding=10)
        style.configure("Link.TButton", background=BACKGROUND, foreground=MUTED, font=("Helvetica", 11, "bold"))

        # State
        self.client = client
        self.session = PracticeSession()
        self.config_error = config_error

        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)
        container = ttk.Frame(self)
        container.grid(row=0, column=0, sticky="nsew")
        container.rowconfigure(0, weight=1)
        container.columnconfigure(0, weight=1)

        self.cards: Dict[str, ttk.Frame] = {}
        logger.ui("Creating card views...")
        for CardClass in (TopicCard, PracticeCard):
            card = CardClass(parent=container, controller=self)
            self.cards[CardClass.__name__] = card
            card.grid(row=0, column=0, sticky="nsew")
            logger.debug(f"  Created: {CardClass.__name__}")

        # Hidden until the first attempt is graded
        self.history_panel = HistoryPanel(self)
        self.history_panel.grid(row=1, column=0, sticky="ew", padx=24, pady=(0, 16))
        self.history_panel.refresh(self.session.history)

        logger.ui("Application initialized successfully")
        self.show_card("TopicCard")

        if config_error:
            # Blocking dialog once the window is drawn
            self.after(200, lambda: messagebox.showerror("Configuration Error", config_error))

    def show_card(self, name: str) -> None:
        logger.ui_transition("current_card", name)
        self.cards[name].tkraise()

    def _show_session_error(self, title: str, suffix: str = "") -> None:
        if self.session.error:
            messagebox.showerror(title, f"{self.session.error}{suffix}")
            self.session.dismiss_error()

    # High-level flow methods ----------------------------------------------

    def select_topic(self, topic: GeographyTopic) -> None:
        try:
            self.session.select_topic(topic)
        except SessionStateError as e:
            logger.warning(str(e))

    def request_question(self) -> None:
        """Start practice (or skip): fetch a question for the current topic."""
        try:
            ticket = self.session.begin_question_request()
        except SessionStateError as e:
            logger.warning(f"Ignoring question request: {e}")
            return

        topic = self.session.topic
        practice: PracticeCard = self.cards["PracticeCard"]
        practice.show_loading("Fetching an exam-style question...")
        self.cards["TopicCard"].set_busy(True)
        self.show_card("PracticeCard")

        run_in_background(
            "generate_question",
            lambda: self.client.request_question(topic),
            on_done=lambda question: self._on_question_ready(ticket, question),
            on_error=lambda err: self._on_question_error(ticket, err),
            post=self._post,
            unexpected=GenerationError,
        )

    def _post(self, callback) -> None:
        """Schedule a worker-thread result on the Tk main loop."""
        self.after(0, callback)

    def _on_question_ready(self, ticket: int, question: Question) -> None:
        self.cards["TopicCard"].set_busy(False)
        if self.session.complete_question_request(ticket, question):
            self.cards["PracticeCard"].show_question(question)

    def _on_question_error(self, ticket: int, error: GeoBuddyError) -> None:
        self.cards["TopicCard"].set_busy(False)
        if not self.session.fail_question_request(ticket, error):
            return
        self.cards["PracticeCard"].reset()
        self.show_card("TopicCard")
        self._show_session_error("Question Error", "\n\nReturning to the topic menu.")

    def update_draft(self, text: str) -> None:
        try:
            self.session.set_draft(text)
        except SessionStateError:
            return
        self.cards["PracticeCard"].update_controls(self.session)

    def submit_answer(self, text: str) -> None:
        try:
            ticket, question, answer = self.session.begin_grading(text)
        except ValidationError:
            messagebox.showwarning("Empty Answer", self.session.error)
            self.session.dismiss_error()
            return
        except SessionStateError as e:
            logger.warning(f"Ignoring submit: {e}")
            return

        practice: PracticeCard = self.cards["PracticeCard"]
        practice.show_grading()

        run_in_background(
            f"grade_answer_{question.id}",
            lambda: self.client.request_grading(question, answer),
            on_done=lambda feedback: self._on_graded(ticket, feedback),
            on_error=lambda err: self._on_grading_error(ticket, err),
            post=self._post,
            unexpected=GradingError,
        )

    def _on_graded(self, ticket: int, feedback: Feedback) -> None:
        if self.session.complete_grading(ticket, feedback) is None:
            return
        self.cards["PracticeCard"].show_feedback(feedback, self.session)
        self.history_panel.refresh(self.session.history)

    def _on_grading_error(self, ticket: int, error: GeoBuddyError) -> None:
        if not self.session.fail_grading(ticket, error):
            return
        self.cards["PracticeCard"].update_controls(self.session)
        self._show_session_error("Grading Error", "\n\nPlease try submitting again.")

    def retry(self) -> None:
        try:
            self.session.retry()
        except SessionStateError as e:
            logger.warning(str(e))
            return
        self.cards["PracticeCard"].show_question(self.session.question)

    def skip(self) -> None:
        if self.session.question is None:
            return
        logger.ui("Skipping to a new question")
        self.request_question()

    def return_to_menu(self) -> None:
        logger.ui("Returning to topic menu")
        self.session.reset()
        self.cards["TopicCard"].set_busy(False)
        self.cards["PracticeCard"].reset()
        self.show_card("TopicCard")


# ---------------------------------------------------------------------------
# Topic card
# ---------------------------------------------------------------------------

class TopicCard(ttk.Frame):
    def __init__(self, parent, controller: GeographyBuddyApp) -> None:
        super().__init__(parent)
        self.controller = controller
        self.columnconfigure(0, weight=1)

        ttk.Label(
            self,
            text="3-Mark Structure Practice",
            font=("Helvetica", 28, "bold"),
            foreground="#ffffff",
        ).grid(row=0, column=0, pady=(40, 10))

        ttk.Label(
            self,
            text="Master the Edexcel Spec A technique:\nPoint → Explanation → Development",
            font=("Helvetica", 14),
            justify="center",
            foreground=ACCENT,
        ).grid(row=1, column=0, pady=(0, 24))

        grid = ttk.Frame(self)
        grid.grid(row=2, column=0, padx=40, pady=(0, 20))
        self.topic_buttons: Dict[GeographyTopic, ttk.Button] = {}
        for index, topic in enumerate(GeographyTopic):
            button = ttk.Button(
                grid,
                text=topic.value,
                width=38,
                command=lambda t=topic: self._on_topic_clicked(t),
            )
            button.grid(row=index // 2, column=index % 2, padx=6, pady=6, sticky="ew")
            self.topic_buttons[topic] = button

        self.api_warning_label = ttk.Label(
            self,
            text=f"⚠ {controller.config_error}" if controller.config_error else "",
            font=("Helvetica", 13),
            foreground="#ff6b6b",
            justify="center",
            wraplength=600,
        )
        self.api_warning_label.grid(row=3, column=0, pady=(0, 10))
        if not controller.config_error:
            self.api_warning_label.grid_remove()

        self.start_button = ttk.Button(
            self,
            text="Start Practice Session →" if not controller.config_error else "API Key Required",
            style="Start.TButton",
            command=controller.request_question,
            state="disabled" if controller.config_error else "normal",
        )
        self.start_button.grid(row=4, column=0, pady=(10, 30))

        self._highlight(controller.session.topic)

    def _on_topic_clicked(self, topic: GeographyTopic) -> None:
        self.controller.select_topic(topic)
        self._highlight(self.controller.session.topic)

    def _highlight(self, selected: GeographyTopic) -> None:
        for topic, button in self.topic_buttons.items():
            button.configure(style="Selected.TButton" if topic == selected else "TButton")

    def set_busy(self, busy: bool) -> None:
        """Disable topic and start controls while a question is loading."""
        state = "disabled" if busy or self.controller.config_error else "normal"
        self.start_button.configure(state=state)
        for button in self.topic_buttons.values():
            button.configure(state="disabled" if busy else "normal")


# ---------------------------------------------------------------------------
# Practice card (question + answer + feedback)
# ---------------------------------------------------------------------------

class PracticeCard(ttk.Frame):
    def __init__(self, parent, controller: GeographyBuddyApp) -> None:
        super().__init__(parent)
        self.controller = controller
        self.columnconfigure(0, weight=7, uniform="cols")
        self.columnconfigure(1, weight=5, uniform="cols")
        self.rowconfigure(1, weight=1)

        header = ttk.Frame(self)
        header.grid(row=0, column=0, columnspan=2, sticky="ew", padx=24, pady=(16, 8))
        ttk.Button(header, text="← Return to Menu", style="Link.TButton",
                   command=controller.return_to_menu).pack(side="left")
        ttk.Label(header, text="QUESTION MODE", foreground="#555555",
                  font=("Helvetica", 10, "bold")).pack(side="right")

        self.spinner = LoadingSpinner(self)

        # Left column: question and answer
        self.left = ttk.Frame(self)
        self.left.grid(row=1, column=0, sticky="nsew", padx=(24, 12))
        self.left.columnconfigure(0, weight=1)

        question_panel = ttk.Frame(self.left, style="Panel.TFrame", padding=16)
        question_panel.grid(row=0, column=0, sticky="ew", pady=(0, 12))
        question_panel.columnconfigure(0, weight=1)
        self.topic_badge = ttk.Label(question_panel, text="", style="Panel.TLabel",
                                     foreground=ACCENT, font=("Helvetica", 11, "bold"))
        self.topic_badge.grid(row=0, column=0, sticky="w")
        ttk.Label(question_panel, text="[3 Marks]", style="Panel.TLabel", foreground=MUTED,
                  font=("Helvetica", 11, "bold")).grid(row=0, column=1, sticky="e")
        self.question_label = ttk.Label(question_panel, text="", style="Panel.TLabel",
                                        font=("Helvetica", 17, "bold"), wraplength=500, justify="left")
        self.question_label.grid(row=1, column=0, columnspan=2, sticky="w", pady=(8, 6))
        ttk.Label(question_panel, text="Structure: Make a point, explain it, then develop that explanation.",
                  style="Panel.TLabel", foreground=MUTED, font=("Helvetica", 11, "italic"),
                  ).grid(row=2, column=0, columnspan=2, sticky="w")

        answer_panel = ttk.Frame(self.left, style="Panel.TFrame", padding=16)
        answer_panel.grid(row=1, column=0, sticky="nsew")
        answer_panel.columnconfigure(0, weight=1)
        ttk.Label(answer_panel, text="STUDENT ANSWER AREA", style="Panel.TLabel",
                  font=("Helvetica", 11, "bold")).grid(row=0, column=0, columnspan=3, sticky="w")
        self.answer_text = tk.Text(
            answer_panel, height=8, wrap="word", font=("Helvetica", 13),
            background="#3d3d3d", foreground="#ffffff", insertbackground="#ffffff",
            relief="flat", padx=10, pady=10,
        )
        self.answer_text.grid(row=1, column=0, columnspan=3, sticky="nsew", pady=(8, 10))
        # <<Modified>> covers typing, pasting, dropping and cutting alike
        self.answer_text.bind("<<Modified>>", self._on_answer_changed)

        self.skip_button = ttk.Button(answer_panel, text="↻ Skip to New Question",
                                      style="Link.TButton", command=controller.skip)
        self.skip_button.grid(row=2, column=0, sticky="w")
        self.submit_button = ttk.Button(answer_panel, text="Submit Response ✓",
                                        command=self._on_submit_clicked)
        self.submit_button.grid(row=2, column=2, sticky="e")
        self.retry_button = ttk.Button(answer_panel, text="Retry This Question",
                                       command=controller.retry)
        self.retry_button.grid(row=2, column=2, sticky="e")
        self.retry_button.grid_remove()

        # Right column: reasoning guide or feedback
        self.right = ttk.Frame(self)
        self.right.grid(row=1, column=1, sticky="nsew", padx=(12, 24))
        self.right.columnconfigure(0, weight=1)
        self.guide = self._build_guide(self.right)
        self.guide.grid(row=0, column=0, sticky="new")
        self.feedback_panel = FeedbackPanel(self.right)
        self.feedback_panel.grid(row=0, column=0, sticky="new")
        self.feedback_panel.grid_remove()

    def _build_guide(self, parent) -> ttk.Frame:
        guide = ttk.Frame(parent, style="Panel.TFrame", padding=16)
        ttk.Label(guide, text='"Chain of Reasoning"', style="Panel.TLabel", foreground=ACCENT,
                  font=("Helvetica", 15, "bold")).grid(row=0, column=0, sticky="w", pady=(0, 10))
        for index, (step, hint) in enumerate(REASONING_STEPS, start=1):
            ttk.Label(guide, text=f"{index}. {step}", style="Panel.TLabel",
                      font=("Helvetica", 13, "bold")).grid(row=index * 2 - 1, column=0, sticky="w")
            ttk.Label(guide, text=hint, style="Panel.TLabel", foreground=MUTED,
                      font=("Helvetica", 11)).grid(row=index * 2, column=0, sticky="w", pady=(0, 8))
        ttk.Label(guide, text="GEOGRAPHY CONNECTIVES", style="Panel.TLabel", foreground=ACCENT,
                  font=("Helvetica", 10, "bold")).grid(row=10, column=0, sticky="w", pady=(10, 2))
        ttk.Label(guide, text="  ·  ".join(CONNECTIVES), style="Panel.TLabel", foreground=TEXT,
                  font=("Helvetica", 11)).grid(row=11, column=0, sticky="w")
        return guide

    # Rendering ------------------------------------------------------------

    def _set_answer(self, text: str, editable: bool) -> None:
        self.answer_text.configure(state="normal")
        self.answer_text.delete("1.0", "end")
        if text:
            self.answer_text.insert("1.0", text)
        self.answer_text.configure(state="normal" if editable else "disabled")

    def show_loading(self, message: str) -> None:
        self.left.grid_remove()
        self.right.grid_remove()
        self.spinner.grid(row=1, column=0, columnspan=2, pady=80)
        self.spinner.start(message)

    def _hide_loading(self) -> None:
        self.spinner.stop()
        self.spinner.grid_remove()
        self.left.grid()
        self.right.grid()

    def show_question(self, question: Question) -> None:
        self._hide_loading()
        self.topic_badge.configure(text=question.topic.short_label.upper())
        self.question_label.configure(text=question.question_text)
        self._set_answer("", editable=True)
        self.feedback_panel.grid_remove()
        self.guide.grid()
        self.update_controls(self.controller.session)
        self.answer_text.focus_set()

    def show_grading(self) -> None:
        self.answer_text.configure(state="disabled")
        self.submit_button.configure(text="Marking...", state="disabled")
        self.skip_button.configure(state="disabled")

    def show_feedback(self, feedback: Feedback, session: PracticeSession) -> None:
        self.guide.grid_remove()
        self.feedback_panel.render(feedback, session.question)
        self.feedback_panel.grid()
        self.update_controls(session)

    def update_controls(self, session: PracticeSession) -> None:
        """Sync buttons and the answer box with the session phase."""
        self.answer_text.configure(state="disabled" if session.answer_locked else "normal")
        self.skip_button.configure(state="disabled" if session.is_busy else "normal")
        if session.feedback is not None:
            self.submit_button.grid_remove()
            self.retry_button.grid()
        else:
            self.retry_button.grid_remove()
            self.submit_button.grid()
            self.submit_button.configure(
                text="Submit Response ✓",
                state="normal" if session.can_submit else "disabled",
            )

    def reset(self) -> None:
        self._hide_loading()
        self.topic_badge.configure(text="")
        self.question_label.configure(text="")
        self._set_answer("", editable=True)
        self.feedback_panel.grid_remove()
        self.guide.grid()

    # Events ---------------------------------------------------------------

    def _on_answer_changed(self, event=None) -> None:
        # Tk only fires <<Modified>> again once the flag is cleared
        if not self.answer_text.tk.getboolean(self.answer_text.edit_modified()):
            return
        self.answer_text.edit_modified(False)
        self.controller.update_draft(self.answer_text.get("1.0", "end-1c"))

    def _on_submit_clicked(self) -> None:
        self.controller.submit_answer(self.answer_text.get("1.0", "end-1c"))


class FeedbackPanel(ttk.Frame):
    """Examiner score banner, comments, strengths, development needs and model phrasing."""

    def __init__(self, parent) -> None:
        super().__init__(parent, style="Panel.TFrame", padding=16)
        self.columnconfigure(0, weight=1)

        self.score_label = tk.Label(self, text="", font=("Helvetica", 36, "bold"),
                                    foreground="#ffffff", background=BAND_COLORS["low"], pady=10)
        self.score_label.grid(row=0, column=0, sticky="ew", pady=(0, 12))

        self._sections: List[ttk.Label] = []
        self.comments = self._section("DETAILED FEEDBACK", 1, TEXT)
        self.strengths = self._section("STRENGTHS", 3, ACCENT)
        self.improvements = self._section("DEVELOPMENT NEEDS", 5, "#ffc078")
        self.suggested = self._section("MODEL PHRASING", 7, TEXT, italic=True)
        self.mark_scheme = self._section("MARK SCHEME", 9, MUTED)

    def _section(self, title: str, row: int, color: str, italic: bool = False) -> ttk.Label:
        ttk.Label(self, text=title, style="Panel.TLabel", foreground=MUTED,
                  font=("Helvetica", 10, "bold")).grid(row=row, column=0, sticky="w", pady=(6, 2))
        body = ttk.Label(self, text="", style="Panel.TLabel", foreground=color, wraplength=360,
                         justify="left", font=("Helvetica", 12, "italic" if italic else "normal"))
        body.grid(row=row + 1, column=0, sticky="w")
        self._sections.append(body)
        return body

    def render(self, feedback: Feedback, question: Optional[Question]) -> None:
        self.score_label.configure(text=f"{feedback.score}/3", background=BAND_COLORS[feedback.band])
        self.comments.configure(text=feedback.comments)
        self.strengths.configure(text="\n".join(f"✓ {s}" for s in feedback.strengths) or "—")
        self.improvements.configure(text="\n".join(f"→ {s}" for s in feedback.improvements) or "—")
        self.suggested.configure(text=f'"{feedback.suggested_answer}"' if feedback.suggested_answer else "—")
        if question is not None:
            self.mark_scheme.configure(
                text="\n".join(f"{i}. {line}" for i, line in enumerate(question.mark_scheme, start=1))
            )


# ---------------------------------------------------------------------------
# History panel
# ---------------------------------------------------------------------------

class HistoryPanel(ttk.Frame):
    """Collapsible list of every graded attempt, most recent first."""

    MAX_LIST_HEIGHT = 260

    def __init__(self, parent) -> None:
        super().__init__(parent)
        self.expanded = False
        self.toggle_button = ttk.Button(self, text="", style="Link.TButton", command=self._toggle)
        self.toggle_button.pack(anchor="w")

        # Rows live in a canvas so a long session scrolls instead of pushing the cards away
        self.viewport = ttk.Frame(self)
        self.canvas = tk.Canvas(self.viewport, highlightthickness=0, background=BACKGROUND, height=0)
        self.scrollbar = ttk.Scrollbar(self.viewport, orient="vertical", command=self.canvas.yview)
        self.list_frame = ttk.Frame(self.canvas)
        self._window = self.canvas.create_window((0, 0), window=self.list_frame, anchor="nw")
        self.canvas.configure(yscrollcommand=self._on_scroll_set)
        self.canvas.pack(side="left", fill="both", expand=True)
        self._scrollbar_visible = False

        self.list_frame.bind("<Configure>", self._on_list_configure)
        self.canvas.bind("<Configure>", lambda e: self.canvas.itemconfigure(self._window, width=e.width))

        self.rows: List[ttk.Frame] = []
        self._items: tuple = ()

    def _toggle(self) -> None:
        self.expanded = not self.expanded
        logger.ui(f"History {'expanded' if self.expanded else 'collapsed'}")
        self.refresh(self._items)

    def _on_list_configure(self, event=None) -> None:
        height = min(self.list_frame.winfo_reqheight(), self.MAX_LIST_HEIGHT)
        self.canvas.configure(scrollregion=self.canvas.bbox("all"), height=height)

    def _on_scroll_set(self, first: str, last: str) -> None:
        """Show the scrollbar only when the rows overflow the viewport."""
        needs_scrollbar = not (float(first) <= 0.0 and float(last) >= 1.0)
        if needs_scrollbar and not self._scrollbar_visible:
            self.scrollbar.pack(side="right", fill="y")
        elif not needs_scrollbar and self._scrollbar_visible:
            self.scrollbar.pack_forget()
        self._scrollbar_visible = needs_scrollbar
        self.scrollbar.set(first, last)

    def refresh(self, items) -> None:
        self._items = tuple(items)
        if not self._items:
            self.grid_remove()
            return
        self.grid()

        arrow = "▾" if self.expanded else "▸"
        self.toggle_button.configure(text=f"{arrow} View History ({len(self._items)})")

        for row in self.rows:
            row.destroy()
        self.rows = []
        if not self.expanded:
            self.viewport.pack_forget()
            return

        self.viewport.pack(fill="x", pady=(8, 0))
        for item in self._items:
            self.rows.append(self._render_row(item))
        self.canvas.yview_moveto(0)

    def _render_row(self, item: HistoryItem) -> ttk.Frame:
        row = ttk.Frame(self.list_frame, style="Panel.TFrame", padding=8)
        row.pack(fill="x", pady=3)
        row.columnconfigure(0, weight=1)
        ttk.Label(row, text=f"{item.question.topic.value}  ·  {item.timestamp.astimezone():%H:%M}",
                  style="Panel.TLabel", foreground=ACCENT,
                  font=("Helvetica", 10, "bold")).grid(row=0, column=0, sticky="w")
        ttk.Label(row, text=item.question.question_text, style="Panel.TLabel", wraplength=760,
                  justify="left", font=("Helvetica", 12, "bold")).grid(row=1, column=0, sticky="w")
        color = BAND_COLORS["full"] if item.feedback.is_full_marks else MUTED
        ttk.Label(row, text=f"{item.feedback.score}/3 Marks", style="Panel.TLabel", foreground=color,
                  font=("Helvetica", 11, "bold")).grid(row=0, column=1, rowspan=2, sticky="e", padx=(12, 0))
        return row


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    force_utf8_output()
    logger.banner("Geography 3-Mark Buddy - Starting Application")

    config_error: Optional[str] = None
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.env_error(str(e))
        settings = Settings()
        config_error = str(e)
    logger.enabled = settings.debug

    client = OpenAIClient(settings)
    if config_error is None:
        try:
            client.configure(settings.api_key)
        except ConfigurationError as e:
            logger.env_error(str(e))
            config_error = str(e)

    logger.info("Creating main application window...")
    app = GeographyBuddyApp(client, config_error=config_error)
    logger.success("Application window created, entering main loop")
    app.mainloop()
    logger.separator("Application Closed")


if __name__ == "__main__":
    main()
