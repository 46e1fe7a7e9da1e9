import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import Difficulty
from .errors import StorageError

logger = logging.getLogger(__name__)

OPTION_LETTERS = "ABCD"

TIER_ORDER = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    answer: str
    explanation: str = ""
    options: Optional[Tuple[str, ...]] = None
    difficulty: Difficulty = Difficulty.EASY
    custom: bool = False

    @property
    def multiple_choice(self):
        return self.options is not None

    def check(self, raw):
        if raw is None:
            return False
        return str(raw).strip().lower() == self.answer.strip().lower()


def choice(qid, text, options, correct, explanation, difficulty):
    return Question(qid, text, OPTION_LETTERS[correct], explanation, tuple(options), difficulty)


def free_text(qid, text, answer, explanation, difficulty):
    return Question(qid, text, answer, explanation, None, difficulty)


E, M, H = Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD

# ---------------------- built-in bank ----------------------
BUILTIN_QUESTIONS = (
    choice("easy-01", "What will be printed?\nint x = 5 + 3;\nSystem.out.println(x);",
           ["5", "8", "53", "Error"], 1, "Basic arithmetic: 5 + 3 equals 8", E),
    choice("easy-02", "Consider:\nfor (int k = 0; k < 20; k = k + 2) {\n  if (k % 3 == 1) {\n    System.out.print(k + \" \");\n  }\n}",
           ["4 16", "4 10 16", "0 6 12 18", "1 4 7 10 13 16 19"], 1,
           "k takes the even values 0..18; of those 4, 10 and 16 leave remainder 1", E),
    choice("easy-03", "What is the output?\nString s = \"Hello\";\nSystem.out.println(s.length());",
           ["4", "5", "6", "Error"], 1, "'Hello' has 5 characters", E),
    choice("easy-04", "What is the output of:\nint[] arr = {1, 2, 3};\nSystem.out.println(arr[1]);",
           ["1", "2", "3", "Error"], 1, "Array indices start at 0, arr[1] is the second element", E),
    choice("easy-05", "Which of these declares a constant in Java?",
           ["const int x = 5;", "final int x = 5;", "static int x = 5;", "private int x = 5;"], 1,
           "The final keyword declares constants in Java", E),
    choice("easy-06", "What is the result of: 7 / 2",
           ["3.5", "3", "4", "2"], 1, "Integer division truncates the decimal part", E),
    choice("easy-07", "Which loop is best when you know the number of iterations?",
           ["while", "do-while", "for", "if"], 2, "for loops are designed for known iteration counts", E),
    choice("easy-08", "What is the output of:\nString str = \"Java\";\nSystem.out.println(str.substring(1, 3));",
           ["Ja", "av", "ava", "va"], 1,
           "substring(1, 3) returns index 1 (inclusive) to 3 (exclusive)", E),
    choice("easy-09", "Which statement correctly creates an ArrayList of integers?",
           ["ArrayList<int> list = new ArrayList<int>();",
            "ArrayList<Integer> list = new ArrayList<Integer>();",
            "ArrayList list = new ArrayList();",
            "ArrayList<int> list = new ArrayList();"], 1,
           "Generics need the Integer wrapper class, not the primitive int", E),
    choice("easy-10", "What is the value of x after:\nint x = 3;\nx += 2;",
           ["2", "3", "5", "6"], 2, "x += 2 is x = x + 2", E),
    choice("easy-11", "What is the correct way to declare a String variable?",
           ["string name;", "String name;", "str name;", "text name;"], 1,
           "String is a class and starts with a capital S", E),
    choice("easy-12", "What is printed by System.out.println(\"Hello\" + 123);",
           ["Hello 123", "Hello123", "246", "Error"], 1,
           "String concatenation appends the number's text", E),

    choice("medium-01", "Consider:\nList<String> animals = new ArrayList<String>();\nanimals.add(\"dog\");\nanimals.add(\"cat\");\n"
           "animals.add(\"snake\");\nanimals.set(2, \"lizard\");\nanimals.add(1, \"fish\");\nanimals.remove(3);\nSystem.out.println(animals);",
           ["[dog, fish, cat]", "[dog, fish, lizard]", "[dog, lizard, fish]", "[fish, dog, cat]"], 0,
           "After set and the insert at 1 the list is [dog, fish, cat, lizard]; remove(3) drops lizard", M),
    choice("medium-02", "What is the output?\nint[][] matrix = { {1, 2}, {3, 4} };\nSystem.out.println(matrix[1][0]);",
           ["1", "2", "3", "4"], 2, "matrix[1][0] is row 1, column 0", M),
    choice("medium-03", "Consider:\npublic interface Shape {\n  int isLargerThan(Shape other);\n}\npublic class Circle implements Shape\n"
           "Which method header satisfies the interface?",
           ["public int isLargerThan(Shape other)", "public int isLargerThan(Circle other)",
            "public boolean isLargerThan(Shape other)", "private int isLargerThan(Shape other)"], 0,
           "The return type and parameter type must match the interface", M),
    choice("medium-04", "What is the difference between '==' and '.equals()' for String comparison?",
           ["They are the same", "'==' compares references, .equals() compares content",
            ".equals() compares references, '==' compares content", "None of the above"], 1,
           "'==' compares object references, .equals() compares the characters", M),
    choice("medium-05", "What is the output of: for(int i=0; i<3; i++) { System.out.print(i); }",
           ["123", "012", "1 2 3", "0 1 2"], 1, "The loop prints 0, 1 and 2 without spaces", M),
    choice("medium-06", "Which collection type should you use for a dynamic size list?",
           ["Array", "ArrayList", "Vector", "LinkedList"], 1,
           "ArrayList grows as needed and is the usual List implementation", M),
    choice("medium-07", "Consider:\npublic static void mystery(List<Integer> nums) {\n  for (int k = 0; k < nums.size(); k++) {\n"
           "    if (nums.get(k).intValue() == 0) {\n      nums.remove(k);\n    }\n  }\n}\n"
           "If nums is [0, 0, 4, 2, 5, 0, 3, 0], what does it contain afterwards?",
           ["[4, 2, 5, 3]", "[0, 4, 2, 5, 3]", "[0, 0, 4, 2, 5, 0, 3]", "[0, 4, 2, 5, 0, 3]"], 1,
           "Removing shifts the remaining elements left, so some zeros are skipped", M),
    choice("medium-08", "What does findLongest(nums, target) return when it counts runs of target and keeps the maximum?",
           ["Length of array", "Number of occurrences of target",
            "Length of longest consecutive sequence of target", "Index of first occurrence of target"], 2,
           "It tracks the longest consecutive run of target", M),

    choice("hard-01", "Consider:\npublic static int mystery(int n) {\n  if (n <= 1) return 0;\n  else return 1 + mystery(n / 2);\n}\n"
           "What is returned by mystery(8)?",
           ["3", "4", "8", "16"], 0, "8 -> 4 -> 2 -> 1 takes three halvings", H),
    choice("hard-02", "What is the time complexity of selection sort?",
           ["O(n)", "O(n log n)", "O(n^2)", "O(n^3)"], 2, "Two nested loops over the array: O(n^2)", H),
    choice("hard-03", "Consider:\npublic static void doSome(int[] arr, int lim) {\n  int v = 0;\n  int k = 0;\n"
           "  while (k < arr.length && arr[k] < lim) {\n    if (arr[k] > v) {\n      v = arr[k];\n    }\n    k++;\n  }\n}\n"
           "What does this method do?",
           ["Finds the largest value in arr", "Finds the largest value less than lim in arr",
            "Counts values less than lim in arr", "Finds the first value greater than lim in arr"], 1,
           "v keeps the largest element seen while elements stay below lim", H),
    choice("hard-04", "What is the output?\ntry {\n    throw new Exception();\n} catch(Exception e) {\n"
           "    System.out.print(\"1\");\n} finally {\n    System.out.print(\"2\");\n}",
           ["1", "2", "12", "Exception"], 2, "catch runs, then finally always runs", H),
    choice("hard-05", "What is the time complexity of binary search?",
           ["O(n)", "O(log n)", "O(n^2)", "O(1)"], 1, "Each step halves the search space", H),
    choice("hard-06", "Which statement about abstract classes is correct?",
           ["They can be instantiated directly", "They can have both implemented and unimplemented methods",
            "They can be used to achieve multiple inheritance", "They must implement all methods from their interfaces"], 1,
           "Abstract classes mix concrete and abstract methods", H),
    choice("hard-07", "What is printed by mystery(1234)?\npublic static void mystery(int x) {\n  System.out.print(x % 10);\n"
           "  if ((x / 10) != 0) {\n    mystery(x / 10);\n  }\n  System.out.print(x % 10);\n}",
           ["1234", "4321", "12344321", "43211234"], 3,
           "Digits print last-to-first on the way down and first-to-last on the way back", H),
)

DEAD_END_QUESTIONS = (
    free_text("dead-easy-01", "What does JVM stand for?", "Java Virtual Machine",
              "The JVM runs Java bytecode", E),
    free_text("dead-easy-02", "What is the entry point method of a Java program?", "main",
              "Every Java program starts in main()", E),
    free_text("dead-medium-01", "Which keyword creates a subclass in Java?", "extends",
              "class B extends A makes B a subclass of A", M),
    free_text("dead-medium-02", "Which keyword refers to the current object?", "this",
              "this is a reference to the object whose method is running", M),
    free_text("dead-medium-03", "Which package holds ArrayList?", "java.util",
              "ArrayList lives in java.util", M),
    free_text("dead-hard-01", "Which keyword stops a field from being serialized?", "transient",
              "transient fields are skipped by serialization", H),
    free_text("dead-hard-02", "Which keyword makes a method usable by one thread at a time?", "synchronized",
              "synchronized methods take the object's monitor", H),
    free_text("dead-hard-03", "Which design pattern guarantees a single instance of a class?", "singleton",
              "A singleton restricts instantiation to one object", H),
)


def tiers_for(difficulty):
    difficulty = Difficulty.parse(difficulty)
    return TIER_ORDER[:TIER_ORDER.index(difficulty) + 1]


def select_pool(difficulty, custom_questions=(), disabled_ids=(), bank=BUILTIN_QUESTIONS):
    """Questions available for a session at ``difficulty``.

    Tiers are cumulative. Disabling only applies to built-in questions. When
    nothing survives the filters the easy built-ins are used, so the result
    is never empty while the bank has easy questions.
    """
    tiers = tiers_for(difficulty)
    disabled = set(disabled_ids)
    pool = [q for q in bank if q.difficulty in tiers and q.id not in disabled]
    pool.extend(q for q in custom_questions if q.difficulty in tiers)
    if not pool:
        logger.warning("No questions left for %s, falling back to easy tier", Difficulty.parse(difficulty).value)
        pool = [q for q in bank if q.difficulty == Difficulty.EASY]
    return pool


def select_dead_end_pool(difficulty, bank=DEAD_END_QUESTIONS):
    difficulty = Difficulty.parse(difficulty)
    if difficulty == Difficulty.HARD:
        tiers = (Difficulty.MEDIUM, Difficulty.HARD)
    else:
        tiers = tiers_for(difficulty)
    return [q for q in bank if q.difficulty in tiers]


# ---------------------- custom questions ----------------------
def question_from_dict(data):
    try:
        options = data.get("options")
        answer = str(data["answer"]).strip()
        if options is not None:
            options = tuple(str(o) for o in options)
            if answer.isdigit():
                answer = OPTION_LETTERS[int(answer)]
            answer = answer.upper()
            if answer not in OPTION_LETTERS[:len(options)]:
                raise ValueError(f"answer {answer!r} does not name an option")
        return Question(
            id=str(data["id"]),
            text=str(data["text"]),
            answer=answer,
            explanation=str(data.get("explanation", "")),
            options=options,
            difficulty=Difficulty.parse(data.get("difficulty", "easy")),
            custom=True,
        )
    except (KeyError, ValueError, IndexError, TypeError, AttributeError) as exc:
        raise StorageError(f"Invalid custom question {data!r}: {exc}") from exc

