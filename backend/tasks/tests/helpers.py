from collections import deque

from tasks.scoring import InferredAttributes, Level, TaskInput, TaskTags


def make_task(task_id, category='Uncategorized', complexity='medium', importance='medium', **tags):
    """Build a TaskInput; keyword tags are liked/urgent/quick/disliked."""
    return TaskInput(
        id=task_id,
        text=f"Task {task_id}",
        tags=TaskTags(**tags),
        inferred=InferredAttributes(
            complexity=Level(complexity),
            importance=Level(importance),
            category=category
        )
    )


class ScriptedRandom:
    """
    Random source replaying fixed values.

    random() returns the next scripted float (0.99 once exhausted, so no
    bundling); randint() returns the next scripted int (the lower bound once
    exhausted).
    """

    def __init__(self, floats=(), ints=()):
        self.floats = deque(floats)
        self.ints = deque(ints)
        self.random_calls = 0
        self.randint_calls = []

    def random(self):
        self.random_calls += 1
        return self.floats.popleft() if self.floats else 0.99

    def randint(self, a, b):
        self.randint_calls.append((a, b))
        return self.ints.popleft() if self.ints else a
