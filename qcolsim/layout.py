# qcolsim/layout.py
# Grid limits shared with the circuit editor.

N_QUBITS = 3
MAX_QUBITS = 4
MAX_COLS = 6
