from .number_sequences import NumberSequence
