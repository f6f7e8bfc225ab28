import unittest

from activity_report import (
    CAPTURING_FRAGMENTS,
    IDLE,
    IN_TASK,
    ActivityEntry,
    ActivityReport,
    ParserState,
    TaskEntry,
    extract,
    extract_and_render_activity_report,
    render,
    step,
)


SAMPLE_DUMP = """TASK com.example.app id=42 userId=0
  ACTIVITY com.example.app/.MainActivity 5f3a1b2 pid=1234
    Local FragmentActivity 1a2b3c4 State:
    Active Fragments:
      #0: HomeFragment{abc123 (uuid) id=0x7f0a}
    Added Fragments:
      #0: com.example.app.HomeFragment{abc123 (uuid) id=0x7f0a}
      #1: androidx.lifecycle.ReportFragment{def456 (uuid) tag=report}
      #2: com.example.app.ui.DetailFragment{789abc (uuid)}
    View Hierarchy:
      DecorView@1f2e3d[MainActivity]
        #0: com.example.app.LateFragment{000 (uuid)}
TASK com.android.launcher3 id=1 userId=0
  ACTIVITY com.android.launcher3/.Launcher 77aa88 pid=999
"""


class ExtractTests(unittest.TestCase):
    def test_extracts_tasks_activities_and_fragments(self) -> None:
        report = extract(SAMPLE_DUMP)
        self.assertEqual(len(report.tasks), 2)
        first, second = report.tasks
        self.assertEqual(first.task_id, "com.example.app")
        self.assertEqual(first.activity.name, "com.example.app/.MainActivity")
        self.assertEqual(
            first.activity.fragments,
            ("com.example.app.HomeFragment", "com.example.app.ui.DetailFragment"),
        )
        self.assertEqual(second.task_id, "com.android.launcher3")
        self.assertEqual(second.activity, ActivityEntry("com.android.launcher3/.Launcher"))

    def test_task_line_count_matches_input(self) -> None:
        text = extract_and_render_activity_report(SAMPLE_DUMP)
        task_lines = [line for line in SAMPLE_DUMP.splitlines() if line.strip().startswith("TASK")]
        self.assertEqual(text.count("Task:"), len(task_lines))

    def test_example_dump_renders_expected_lines(self) -> None:
        dump = "\n".join([
            "TASK id=1",
            "ACTIVITY com.a.Main extra",
            "Added Fragments:",
            "#0: com.a.ListFragment{...}",
            "View Hierarchy:",
        ])
        text = extract_and_render_activity_report(dump)
        self.assertIn("Task: 1\n", text)
        self.assertIn("  Activity: com.a.Main\n", text)
        self.assertIn("    Fragments:\n", text)
        self.assertIn("      - com.a.ListFragment\n", text)

    def test_denylisted_fragment_suffixes_are_skipped(self) -> None:
        dump = "\n".join([
            "TASK 7",
            "ACTIVITY com.foo.Main",
            "Added Fragments:",
            "#0: com.foo.ReportFragment{1}",
            "#1: com.foo.MyReportFragmentX{2}",
            "#2: com.foo.SomeInjectFragment{3}",
            "#3: com.foo.DispatchFragment{4}",
        ])
        fragments = extract(dump).tasks[0].activity.fragments
        self.assertEqual(fragments, ("com.foo.MyReportFragmentX",))
        self.assertNotIn("com.foo.ReportFragment\n", render(extract(dump)))

    def test_view_hierarchy_closes_capture_for_rest_of_task(self) -> None:
        dump = "\n".join([
            "TASK 3",
            "ACTIVITY com.foo.Main",
            "Added Fragments:",
            "#0: com.foo.First{1}",
            "View Hierarchy:",
            "#1: com.foo.AfterHierarchy{2}",
            "Added Fragments:",
            "#0: com.foo.Reopened{3}",
        ])
        fragments = extract(dump).tasks[0].activity.fragments
        self.assertEqual(fragments, ("com.foo.First",))

    def test_fragment_lines_outside_section_are_ignored(self) -> None:
        dump = "\n".join([
            "TASK 3",
            "ACTIVITY com.foo.Main",
            "#0: com.foo.Active{1}",
        ])
        self.assertEqual(extract(dump).tasks[0].activity.fragments, ())

    def test_new_task_resets_fragments(self) -> None:
        dump = "\n".join([
            "TASK 1",
            "ACTIVITY com.foo.A",
            "Added Fragments:",
            "#0: com.foo.One{1}",
            "TASK 2",
            "ACTIVITY com.foo.B",
        ])
        report = extract(dump)
        self.assertEqual(report.tasks[0].activity.fragments, ("com.foo.One",))
        self.assertEqual(report.tasks[1].activity.fragments, ())

    def test_superseded_activity_fragments_stay_with_last_activity(self) -> None:
        # Known quirk: fragments of an earlier activity in the same task are
        # attributed to the last ACTIVITY line.
        dump = "\n".join([
            "TASK 9",
            "ACTIVITY com.foo.First",
            "Added Fragments:",
            "#0: com.foo.FirstFragment{1}",
            "ACTIVITY com.foo.Second",
        ])
        task = extract(dump).tasks[0]
        self.assertEqual(task.activity.name, "com.foo.Second")
        self.assertEqual(task.activity.fragments, ("com.foo.FirstFragment",))

    def test_task_without_activity_renders_only_task_line(self) -> None:
        report = extract("TASK 5\n  some unrelated line\n")
        self.assertEqual(report.tasks, (TaskEntry("5"),))
        self.assertEqual(render(report), "Task: 5\n\n")

    def test_fragments_without_activity_are_not_rendered(self) -> None:
        dump = "TASK 5\nAdded Fragments:\n#0: com.foo.Orphan{1}\n"
        self.assertEqual(render(extract(dump)), "Task: 5\n\n")

    def test_lines_before_first_task_are_ignored(self) -> None:
        dump = "ACTIVITY com.foo.Stray\nAdded Fragments:\n#0: com.foo.X{1}\nTASK 2\n"
        self.assertEqual(extract(dump).tasks, (TaskEntry("2"),))

    def test_garbage_and_error_text_yield_empty_report(self) -> None:
        self.assertEqual(extract(""), ActivityReport())
        error = "Error executing command: adb shell dumpsys activity top\nadb not found."
        self.assertEqual(extract_and_render_activity_report(error), "")

    def test_task_line_without_id_is_ignored(self) -> None:
        report = extract("TASK\nTASK 4\n")
        self.assertEqual(report.tasks, (TaskEntry("4"),))

    def test_render_is_idempotent(self) -> None:
        report = extract(SAMPLE_DUMP)
        self.assertEqual(render(report), render(report))

    def test_to_dict_exposes_structure(self) -> None:
        data = extract("TASK 1\nACTIVITY a.B\nAdded Fragments:\n#0: a.C{x}\n").to_dict()
        self.assertEqual(data, {"tasks": [{"task_id": "1", "activity": {"name": "a.B", "fragments": ["a.C"]}}]})


class StepTests(unittest.TestCase):
    def test_transitions(self) -> None:
        state, closed = step(ParserState(), "  TASK 10 extra")
        self.assertIsNone(closed)
        self.assertEqual(state, ParserState(IN_TASK, "10"))

        state, _ = step(state, "ACTIVITY com.foo.Main 123")
        self.assertEqual(state.activity, "com.foo.Main")

        state, _ = step(state, "Added Fragments:")
        self.assertEqual(state.mode, CAPTURING_FRAGMENTS)

        state, _ = step(state, "View Hierarchy:")
        self.assertEqual(state.mode, IN_TASK)
        self.assertTrue(state.hierarchy_seen)

        state, closed = step(state, "TASK 11")
        self.assertEqual(closed, TaskEntry("10", ActivityEntry("com.foo.Main")))
        self.assertEqual(state, ParserState(IN_TASK, "11"))

    def test_idle_state_ignores_non_task_lines(self) -> None:
        state, closed = step(ParserState(), "Added Fragments:")
        self.assertEqual(state.mode, IDLE)
        self.assertIsNone(closed)

    def test_step_does_not_mutate_input_state(self) -> None:
        start = ParserState(CAPTURING_FRAGMENTS, "1", "a.B")
        step(start, "#0: a.C{1}")
        self.assertEqual(start.fragments, ())


if __name__ == "__main__":
    unittest.main()
