"""
Terminating sample programs shared by the property and backend tests.

Each entry is (name, source, input bytes, expected output or None).
"""

HELLO_WORLD = "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
HELLO_WORLD_2 = "++++++++++[>+++++++>++++++++++>+++>+<<<<-]>++.>+.+++++++..+++.>++.<<+++++++++++++++.>.+++.------.--------.>+.>."

# Reverses its input up to EOF.
REVERSE = ">,[>,]<[.<]"

# Adds two input digits and prints the result digit.
ADD_DIGITS = ",>,[<+>-]<------------------------------------------------."

# Copies cell 0 into cell 1 using cell 2 as a temp, then prints all three cells.
COPY = "+++++++[>+>+<<-]>>[<<+>>-]<<.>.>."

# Nested multiply: 4 * 5 * 3 into cell 2.
NESTED = "++++[>+++++[>+++<-]<-]>>."

# Cell wrap in both directions.
WRAP = "-.+.++[-]+++.>-[-].<[-]-."

PROGRAMS = [
    ("hello_world", HELLO_WORLD, b"", b"Hello World!\n"),
    ("hello_world_2", HELLO_WORLD_2, b"", b"Hello World!\n"),
    ("reverse", REVERSE, b"abc", b"cba"),
    ("add_digits", ADD_DIGITS, b"34", b"7"),
    ("copy", COPY, b"", b"\x07\x07\x00"),
    ("nested", NESTED, b"", bytes([60])),
    ("wrap", WRAP, b"", b"\xff\x00\x03\x00\xff"),
    ("echo", ",.", b"A", b"A"),
    ("eight_by_eight", "++++++++[>++++++++<-]>.", b"", bytes([64])),
    ("eof_is_zero", ",.,.", b"x", b"x\x00"),
    ("comments", "this is + a comment +. with (text) in it", b"", b"\x02"),
]
