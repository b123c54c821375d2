"""
Motorola 6809 / Hitachi 6309 Opcode Tables
==========================================

Opcode table for the 6809 and the 6309 extensions. Entries are keyed by
``(mnemonic, mode)`` and give the opcode (with its $10 or $11 page prefix
where it has one) and the instruction size. Indexed sizes include the
post-byte; the encoder adds the extra offset bytes of the chosen form.

Instructions that only exist on the 6309 are listed in ``HD6309_ONLY`` and
are hidden unless the CPU model is created with the extended set enabled.

Example Usage
-------------
    >>> table = build_table(extended=False)
    >>> info = table[("ldd", AddressingMode.IMMEDIATE)]
    >>> hex(info.opcode), info.size
    ('0xcc', 3)
"""

from romasm.cpu.base import AddressingMode, InstructionInfo


# =============================================================================
# Main Opcode Table
# =============================================================================

OPCODE_TABLE: dict[tuple[str, AddressingMode], InstructionInfo] = {
    ("abx", AddressingMode.INHERENT): InstructionInfo(0x3A, 1),
    ("adca", AddressingMode.IMMEDIATE): InstructionInfo(0x89, 2),
    ("adca", AddressingMode.DIRECT): InstructionInfo(0x99, 2),
    ("adca", AddressingMode.INDEXED): InstructionInfo(0xA9, 2),
    ("adca", AddressingMode.EXTENDED): InstructionInfo(0xB9, 3),
    ("adcb", AddressingMode.IMMEDIATE): InstructionInfo(0xC9, 2),
    ("adcb", AddressingMode.DIRECT): InstructionInfo(0xD9, 2),
    ("adcb", AddressingMode.INDEXED): InstructionInfo(0xE9, 2),
    ("adcb", AddressingMode.EXTENDED): InstructionInfo(0xF9, 3),
    ("adcd", AddressingMode.IMMEDIATE): InstructionInfo(0x1089, 4),
    ("adcd", AddressingMode.DIRECT): InstructionInfo(0x1099, 3),
    ("adcd", AddressingMode.INDEXED): InstructionInfo(0x10A9, 3),
    ("adcd", AddressingMode.EXTENDED): InstructionInfo(0x10B9, 4),
    ("adda", AddressingMode.IMMEDIATE): InstructionInfo(0x8B, 2),
    ("adda", AddressingMode.DIRECT): InstructionInfo(0x9B, 2),
    ("adda", AddressingMode.INDEXED): InstructionInfo(0xAB, 2),
    ("adda", AddressingMode.EXTENDED): InstructionInfo(0xBB, 3),
    ("addb", AddressingMode.IMMEDIATE): InstructionInfo(0xCB, 2),
    ("addb", AddressingMode.DIRECT): InstructionInfo(0xDB, 2),
    ("addb", AddressingMode.INDEXED): InstructionInfo(0xEB, 2),
    ("addb", AddressingMode.EXTENDED): InstructionInfo(0xFB, 3),
    ("addd", AddressingMode.IMMEDIATE): InstructionInfo(0xC3, 3),
    ("addd", AddressingMode.DIRECT): InstructionInfo(0xD3, 2),
    ("addd", AddressingMode.INDEXED): InstructionInfo(0xE3, 2),
    ("addd", AddressingMode.EXTENDED): InstructionInfo(0xF3, 3),
    ("adde", AddressingMode.IMMEDIATE): InstructionInfo(0x118B, 3),
    ("adde", AddressingMode.DIRECT): InstructionInfo(0x119B, 3),
    ("adde", AddressingMode.INDEXED): InstructionInfo(0x11AB, 3),
    ("adde", AddressingMode.EXTENDED): InstructionInfo(0x11BB, 4),
    ("addf", AddressingMode.IMMEDIATE): InstructionInfo(0x11CB, 3),
    ("addf", AddressingMode.DIRECT): InstructionInfo(0x11DB, 3),
    ("addf", AddressingMode.INDEXED): InstructionInfo(0x11EB, 3),
    ("addf", AddressingMode.EXTENDED): InstructionInfo(0x11FB, 4),
    ("addw", AddressingMode.IMMEDIATE): InstructionInfo(0x108B, 4),
    ("addw", AddressingMode.DIRECT): InstructionInfo(0x109B, 3),
    ("addw", AddressingMode.INDEXED): InstructionInfo(0x10AB, 3),
    ("addw", AddressingMode.EXTENDED): InstructionInfo(0x10BB, 4),
    ("aim", AddressingMode.DIRECT): InstructionInfo(0x02, 3),
    ("aim", AddressingMode.INDEXED): InstructionInfo(0x62, 3),
    ("aim", AddressingMode.EXTENDED): InstructionInfo(0x72, 4),
    ("anda", AddressingMode.IMMEDIATE): InstructionInfo(0x84, 2),
    ("anda", AddressingMode.DIRECT): InstructionInfo(0x94, 2),
    ("anda", AddressingMode.INDEXED): InstructionInfo(0xA4, 2),
    ("anda", AddressingMode.EXTENDED): InstructionInfo(0xB4, 3),
    ("andb", AddressingMode.IMMEDIATE): InstructionInfo(0xC4, 2),
    ("andb", AddressingMode.DIRECT): InstructionInfo(0xD4, 2),
    ("andb", AddressingMode.INDEXED): InstructionInfo(0xE4, 2),
    ("andb", AddressingMode.EXTENDED): InstructionInfo(0xF4, 3),
    ("andcc", AddressingMode.IMMEDIATE): InstructionInfo(0x1C, 2),
    ("andd", AddressingMode.IMMEDIATE): InstructionInfo(0x1084, 4),
    ("andd", AddressingMode.DIRECT): InstructionInfo(0x1094, 3),
    ("andd", AddressingMode.INDEXED): InstructionInfo(0x10A4, 3),
    ("andd", AddressingMode.EXTENDED): InstructionInfo(0x10B4, 4),
    ("asla", AddressingMode.INHERENT): InstructionInfo(0x48, 1),
    ("aslb", AddressingMode.INHERENT): InstructionInfo(0x58, 1),
    ("asld", AddressingMode.INHERENT): InstructionInfo(0x1048, 2),
    ("asl", AddressingMode.DIRECT): InstructionInfo(0x08, 2),
    ("asl", AddressingMode.INDEXED): InstructionInfo(0x68, 2),
    ("asl", AddressingMode.EXTENDED): InstructionInfo(0x78, 3),
    ("asra", AddressingMode.INHERENT): InstructionInfo(0x47, 1),
    ("asrb", AddressingMode.INHERENT): InstructionInfo(0x57, 1),
    ("asrd", AddressingMode.INHERENT): InstructionInfo(0x1047, 2),
    ("asr", AddressingMode.DIRECT): InstructionInfo(0x07, 2),
    ("asr", AddressingMode.INDEXED): InstructionInfo(0x67, 2),
    ("asr", AddressingMode.EXTENDED): InstructionInfo(0x77, 3),
    ("bita", AddressingMode.IMMEDIATE): InstructionInfo(0x85, 2),
    ("bita", AddressingMode.DIRECT): InstructionInfo(0x95, 2),
    ("bita", AddressingMode.INDEXED): InstructionInfo(0xA5, 2),
    ("bita", AddressingMode.EXTENDED): InstructionInfo(0xB5, 3),
    ("bitb", AddressingMode.IMMEDIATE): InstructionInfo(0xC5, 2),
    ("bitb", AddressingMode.DIRECT): InstructionInfo(0xD5, 2),
    ("bitb", AddressingMode.INDEXED): InstructionInfo(0xE5, 2),
    ("bitb", AddressingMode.EXTENDED): InstructionInfo(0xF5, 3),
    ("bitd", AddressingMode.IMMEDIATE): InstructionInfo(0x1085, 4),
    ("bitd", AddressingMode.DIRECT): InstructionInfo(0x1095, 3),
    ("bitd", AddressingMode.INDEXED): InstructionInfo(0x10A5, 3),
    ("bitd", AddressingMode.EXTENDED): InstructionInfo(0x10B5, 4),
    ("bitmd", AddressingMode.IMMEDIATE): InstructionInfo(0x113C, 3),
    ("clra", AddressingMode.INHERENT): InstructionInfo(0x4F, 1),
    ("clrb", AddressingMode.INHERENT): InstructionInfo(0x5F, 1),
    ("clrd", AddressingMode.INHERENT): InstructionInfo(0x104F, 2),
    ("clre", AddressingMode.INHERENT): InstructionInfo(0x114F, 2),
    ("clrf", AddressingMode.INHERENT): InstructionInfo(0x115F, 2),
    ("clrw", AddressingMode.INHERENT): InstructionInfo(0x105F, 2),
    ("clr", AddressingMode.DIRECT): InstructionInfo(0x0F, 2),
    ("clr", AddressingMode.INDEXED): InstructionInfo(0x6F, 2),
    ("clr", AddressingMode.EXTENDED): InstructionInfo(0x7F, 3),
    ("cmpa", AddressingMode.IMMEDIATE): InstructionInfo(0x81, 2),
    ("cmpa", AddressingMode.DIRECT): InstructionInfo(0x91, 2),
    ("cmpa", AddressingMode.INDEXED): InstructionInfo(0xA1, 2),
    ("cmpa", AddressingMode.EXTENDED): InstructionInfo(0xB1, 3),
    ("cmpb", AddressingMode.IMMEDIATE): InstructionInfo(0xC1, 2),
    ("cmpb", AddressingMode.DIRECT): InstructionInfo(0xD1, 2),
    ("cmpb", AddressingMode.INDEXED): InstructionInfo(0xE1, 2),
    ("cmpb", AddressingMode.EXTENDED): InstructionInfo(0xF1, 3),
    ("cmpd", AddressingMode.IMMEDIATE): InstructionInfo(0x1083, 4),
    ("cmpd", AddressingMode.DIRECT): InstructionInfo(0x1093, 3),
    ("cmpd", AddressingMode.INDEXED): InstructionInfo(0x10A3, 3),
    ("cmpd", AddressingMode.EXTENDED): InstructionInfo(0x10B3, 4),
    ("cmpe", AddressingMode.IMMEDIATE): InstructionInfo(0x1181, 3),
    ("cmpe", AddressingMode.DIRECT): InstructionInfo(0x1191, 3),
    ("cmpe", AddressingMode.INDEXED): InstructionInfo(0x11A1, 3),
    ("cmpe", AddressingMode.EXTENDED): InstructionInfo(0x11B1, 4),
    ("cmpf", AddressingMode.IMMEDIATE): InstructionInfo(0x11C1, 3),
    ("cmpf", AddressingMode.DIRECT): InstructionInfo(0x11D1, 3),
    ("cmpf", AddressingMode.INDEXED): InstructionInfo(0x11E1, 3),
    ("cmpf", AddressingMode.EXTENDED): InstructionInfo(0x11F1, 4),
    ("cmps", AddressingMode.IMMEDIATE): InstructionInfo(0x118C, 4),
    ("cmps", AddressingMode.DIRECT): InstructionInfo(0x119C, 3),
    ("cmps", AddressingMode.INDEXED): InstructionInfo(0x11AC, 3),
    ("cmps", AddressingMode.EXTENDED): InstructionInfo(0x11BC, 4),
    ("cmpu", AddressingMode.IMMEDIATE): InstructionInfo(0x1183, 4),
    ("cmpu", AddressingMode.DIRECT): InstructionInfo(0x1193, 3),
    ("cmpu", AddressingMode.INDEXED): InstructionInfo(0x11A3, 3),
    ("cmpu", AddressingMode.EXTENDED): InstructionInfo(0x11B3, 4),
    ("cmpw", AddressingMode.IMMEDIATE): InstructionInfo(0x1081, 4),
    ("cmpw", AddressingMode.DIRECT): InstructionInfo(0x1091, 3),
    ("cmpw", AddressingMode.INDEXED): InstructionInfo(0x10A1, 3),
    ("cmpw", AddressingMode.EXTENDED): InstructionInfo(0x10B1, 4),
    ("cmpx", AddressingMode.IMMEDIATE): InstructionInfo(0x8C, 3),
    ("cmpx", AddressingMode.DIRECT): InstructionInfo(0x9C, 2),
    ("cmpx", AddressingMode.INDEXED): InstructionInfo(0xAC, 2),
    ("cmpx", AddressingMode.EXTENDED): InstructionInfo(0xBC, 3),
    ("cmpy", AddressingMode.IMMEDIATE): InstructionInfo(0x108C, 4),
    ("cmpy", AddressingMode.DIRECT): InstructionInfo(0x109C, 3),
    ("cmpy", AddressingMode.INDEXED): InstructionInfo(0x10AC, 3),
    ("cmpy", AddressingMode.EXTENDED): InstructionInfo(0x10BC, 4),
    ("coma", AddressingMode.INHERENT): InstructionInfo(0x43, 1),
    ("comb", AddressingMode.INHERENT): InstructionInfo(0x53, 1),
    ("comd", AddressingMode.INHERENT): InstructionInfo(0x1043, 2),
    ("come", AddressingMode.INHERENT): InstructionInfo(0x1143, 2),
    ("comf", AddressingMode.INHERENT): InstructionInfo(0x1153, 2),
    ("comw", AddressingMode.INHERENT): InstructionInfo(0x1053, 2),
    ("com", AddressingMode.DIRECT): InstructionInfo(0x03, 2),
    ("com", AddressingMode.INDEXED): InstructionInfo(0x63, 2),
    ("com", AddressingMode.EXTENDED): InstructionInfo(0x73, 3),
    ("cwai", AddressingMode.IMMEDIATE): InstructionInfo(0x3C, 2),
    ("daa", AddressingMode.INHERENT): InstructionInfo(0x19, 1),
    ("deca", AddressingMode.INHERENT): InstructionInfo(0x4A, 1),
    ("decb", AddressingMode.INHERENT): InstructionInfo(0x5A, 1),
    ("decd", AddressingMode.INHERENT): InstructionInfo(0x104A, 2),
    ("dece", AddressingMode.INHERENT): InstructionInfo(0x114A, 2),
    ("decf", AddressingMode.INHERENT): InstructionInfo(0x115A, 2),
    ("decw", AddressingMode.INHERENT): InstructionInfo(0x105A, 2),
    ("dec", AddressingMode.DIRECT): InstructionInfo(0x0A, 2),
    ("dec", AddressingMode.INDEXED): InstructionInfo(0x6A, 2),
    ("dec", AddressingMode.EXTENDED): InstructionInfo(0x7A, 3),
    ("divd", AddressingMode.IMMEDIATE): InstructionInfo(0x118D, 3),
    ("divd", AddressingMode.DIRECT): InstructionInfo(0x119D, 3),
    ("divd", AddressingMode.INDEXED): InstructionInfo(0x11AD, 3),
    ("divd", AddressingMode.EXTENDED): InstructionInfo(0x11BD, 4),
    ("divq", AddressingMode.IMMEDIATE): InstructionInfo(0x118E, 4),
    ("divq", AddressingMode.DIRECT): InstructionInfo(0x119E, 3),
    ("divq", AddressingMode.INDEXED): InstructionInfo(0x11AE, 3),
    ("divq", AddressingMode.EXTENDED): InstructionInfo(0x11BE, 4),
    ("eim", AddressingMode.DIRECT): InstructionInfo(0x05, 3),
    ("eim", AddressingMode.INDEXED): InstructionInfo(0x65, 3),
    ("eim", AddressingMode.EXTENDED): InstructionInfo(0x75, 4),
    ("eora", AddressingMode.IMMEDIATE): InstructionInfo(0x88, 2),
    ("eora", AddressingMode.DIRECT): InstructionInfo(0x98, 2),
    ("eora", AddressingMode.INDEXED): InstructionInfo(0xA8, 2),
    ("eora", AddressingMode.EXTENDED): InstructionInfo(0xB8, 3),
    ("eorb", AddressingMode.IMMEDIATE): InstructionInfo(0xC8, 2),
    ("eorb", AddressingMode.DIRECT): InstructionInfo(0xD8, 2),
    ("eorb", AddressingMode.INDEXED): InstructionInfo(0xE8, 2),
    ("eorb", AddressingMode.EXTENDED): InstructionInfo(0xF8, 3),
    ("eord", AddressingMode.IMMEDIATE): InstructionInfo(0x1088, 4),
    ("eord", AddressingMode.DIRECT): InstructionInfo(0x1098, 3),
    ("eord", AddressingMode.INDEXED): InstructionInfo(0x10A8, 3),
    ("eord", AddressingMode.EXTENDED): InstructionInfo(0x10B8, 4),
    ("exg", AddressingMode.REGISTER): InstructionInfo(0x1E, 2),
    ("inca", AddressingMode.INHERENT): InstructionInfo(0x4C, 1),
    ("incb", AddressingMode.INHERENT): InstructionInfo(0x5C, 1),
    ("incd", AddressingMode.INHERENT): InstructionInfo(0x104C, 2),
    ("ince", AddressingMode.INHERENT): InstructionInfo(0x114C, 2),
    ("incf", AddressingMode.INHERENT): InstructionInfo(0x115C, 2),
    ("incw", AddressingMode.INHERENT): InstructionInfo(0x105C, 2),
    ("inc", AddressingMode.DIRECT): InstructionInfo(0x0C, 2),
    ("inc", AddressingMode.INDEXED): InstructionInfo(0x6C, 2),
    ("inc", AddressingMode.EXTENDED): InstructionInfo(0x7C, 3),
    ("jmp", AddressingMode.DIRECT): InstructionInfo(0x0E, 2),
    ("jmp", AddressingMode.INDEXED): InstructionInfo(0x6E, 2),
    ("jmp", AddressingMode.EXTENDED): InstructionInfo(0x7E, 3),
    ("jsr", AddressingMode.DIRECT): InstructionInfo(0x9D, 2),
    ("jsr", AddressingMode.INDEXED): InstructionInfo(0xAD, 2),
    ("jsr", AddressingMode.EXTENDED): InstructionInfo(0xBD, 3),
    ("lda", AddressingMode.IMMEDIATE): InstructionInfo(0x86, 2),
    ("lda", AddressingMode.DIRECT): InstructionInfo(0x96, 2),
    ("lda", AddressingMode.INDEXED): InstructionInfo(0xA6, 2),
    ("lda", AddressingMode.EXTENDED): InstructionInfo(0xB6, 3),
    ("ldb", AddressingMode.IMMEDIATE): InstructionInfo(0xC6, 2),
    ("ldb", AddressingMode.DIRECT): InstructionInfo(0xD6, 2),
    ("ldb", AddressingMode.INDEXED): InstructionInfo(0xE6, 2),
    ("ldb", AddressingMode.EXTENDED): InstructionInfo(0xF6, 3),
    ("ldd", AddressingMode.IMMEDIATE): InstructionInfo(0xCC, 3),
    ("ldd", AddressingMode.DIRECT): InstructionInfo(0xDC, 2),
    ("ldd", AddressingMode.INDEXED): InstructionInfo(0xEC, 2),
    ("ldd", AddressingMode.EXTENDED): InstructionInfo(0xFC, 3),
    ("lde", AddressingMode.IMMEDIATE): InstructionInfo(0x1186, 3),
    ("lde", AddressingMode.DIRECT): InstructionInfo(0x1196, 3),
    ("lde", AddressingMode.INDEXED): InstructionInfo(0x11A6, 3),
    ("lde", AddressingMode.EXTENDED): InstructionInfo(0x11B6, 4),
    ("ldf", AddressingMode.IMMEDIATE): InstructionInfo(0x11C6, 3),
    ("ldf", AddressingMode.DIRECT): InstructionInfo(0x11D6, 3),
    ("ldf", AddressingMode.INDEXED): InstructionInfo(0x11E6, 3),
    ("ldf", AddressingMode.EXTENDED): InstructionInfo(0x11F6, 4),
    ("ldq", AddressingMode.IMMEDIATE): InstructionInfo(0xCD, 5),
    ("ldq", AddressingMode.DIRECT): InstructionInfo(0x10DC, 3),
    ("ldq", AddressingMode.INDEXED): InstructionInfo(0x10EC, 3),
    ("ldq", AddressingMode.EXTENDED): InstructionInfo(0x10FC, 4),
    ("lds", AddressingMode.IMMEDIATE): InstructionInfo(0x10CE, 4),
    ("lds", AddressingMode.DIRECT): InstructionInfo(0x10DE, 3),
    ("lds", AddressingMode.INDEXED): InstructionInfo(0x10EE, 3),
    ("lds", AddressingMode.EXTENDED): InstructionInfo(0x10FE, 4),
    ("ldu", AddressingMode.IMMEDIATE): InstructionInfo(0xCE, 3),
    ("ldu", AddressingMode.DIRECT): InstructionInfo(0xDE, 2),
    ("ldu", AddressingMode.INDEXED): InstructionInfo(0xEE, 2),
    ("ldu", AddressingMode.EXTENDED): InstructionInfo(0xFE, 3),
    ("ldw", AddressingMode.IMMEDIATE): InstructionInfo(0x1086, 4),
    ("ldw", AddressingMode.DIRECT): InstructionInfo(0x1096, 3),
    ("ldw", AddressingMode.INDEXED): InstructionInfo(0x10A6, 3),
    ("ldw", AddressingMode.EXTENDED): InstructionInfo(0x10B6, 4),
    ("ldx", AddressingMode.IMMEDIATE): InstructionInfo(0x8E, 3),
    ("ldx", AddressingMode.DIRECT): InstructionInfo(0x9E, 2),
    ("ldx", AddressingMode.INDEXED): InstructionInfo(0xAE, 2),
    ("ldx", AddressingMode.EXTENDED): InstructionInfo(0xBE, 3),
    ("ldy", AddressingMode.IMMEDIATE): InstructionInfo(0x108E, 4),
    ("ldy", AddressingMode.DIRECT): InstructionInfo(0x109E, 3),
    ("ldy", AddressingMode.INDEXED): InstructionInfo(0x10AE, 3),
    ("ldy", AddressingMode.EXTENDED): InstructionInfo(0x10BE, 4),
    ("ldmd", AddressingMode.IMMEDIATE): InstructionInfo(0x113D, 3),
    ("leas", AddressingMode.INDEXED): InstructionInfo(0x32, 2),
    ("leau", AddressingMode.INDEXED): InstructionInfo(0x33, 2),
    ("leax", AddressingMode.INDEXED): InstructionInfo(0x30, 2),
    ("leay", AddressingMode.INDEXED): InstructionInfo(0x31, 2),
    ("lsra", AddressingMode.INHERENT): InstructionInfo(0x44, 1),
    ("lsrb", AddressingMode.INHERENT): InstructionInfo(0x54, 1),
    ("lsrd", AddressingMode.INHERENT): InstructionInfo(0x1044, 2),
    ("lsrw", AddressingMode.INHERENT): InstructionInfo(0x1054, 2),
    ("lsr", AddressingMode.DIRECT): InstructionInfo(0x04, 2),
    ("lsr", AddressingMode.INDEXED): InstructionInfo(0x64, 2),
    ("lsr", AddressingMode.EXTENDED): InstructionInfo(0x74, 3),
    ("mul", AddressingMode.INHERENT): InstructionInfo(0x3D, 1),
    ("muld", AddressingMode.IMMEDIATE): InstructionInfo(0x118F, 4),
    ("muld", AddressingMode.DIRECT): InstructionInfo(0x119F, 3),
    ("muld", AddressingMode.INDEXED): InstructionInfo(0x11AF, 3),
    ("muld", AddressingMode.EXTENDED): InstructionInfo(0x11BF, 4),
    ("nega", AddressingMode.INHERENT): InstructionInfo(0x40, 1),
    ("negb", AddressingMode.INHERENT): InstructionInfo(0x50, 1),
    ("negd", AddressingMode.INHERENT): InstructionInfo(0x1040, 2),
    ("neg", AddressingMode.DIRECT): InstructionInfo(0x00, 2),
    ("neg", AddressingMode.INDEXED): InstructionInfo(0x60, 2),
    ("neg", AddressingMode.EXTENDED): InstructionInfo(0x70, 3),
    ("nop", AddressingMode.INHERENT): InstructionInfo(0x12, 1),
    ("oim", AddressingMode.DIRECT): InstructionInfo(0x01, 3),
    ("oim", AddressingMode.INDEXED): InstructionInfo(0x61, 3),
    ("oim", AddressingMode.EXTENDED): InstructionInfo(0x71, 4),
    ("ora", AddressingMode.IMMEDIATE): InstructionInfo(0x8A, 2),
    ("ora", AddressingMode.DIRECT): InstructionInfo(0x9A, 2),
    ("ora", AddressingMode.INDEXED): InstructionInfo(0xAA, 2),
    ("ora", AddressingMode.EXTENDED): InstructionInfo(0xBA, 3),
    ("orb", AddressingMode.IMMEDIATE): InstructionInfo(0xCA, 2),
    ("orb", AddressingMode.DIRECT): InstructionInfo(0xDA, 2),
    ("orb", AddressingMode.INDEXED): InstructionInfo(0xEA, 2),
    ("orb", AddressingMode.EXTENDED): InstructionInfo(0xFA, 3),
    ("orcc", AddressingMode.IMMEDIATE): InstructionInfo(0x1A, 2),
    ("ord", AddressingMode.IMMEDIATE): InstructionInfo(0x108A, 4),
    ("ord", AddressingMode.DIRECT): InstructionInfo(0x109A, 3),
    ("ord", AddressingMode.INDEXED): InstructionInfo(0x10AA, 3),
    ("ord", AddressingMode.EXTENDED): InstructionInfo(0x10BA, 4),
    ("pshs", AddressingMode.REGISTER): InstructionInfo(0x34, 2),
    ("pshu", AddressingMode.REGISTER): InstructionInfo(0x36, 2),
    ("pshsw", AddressingMode.INHERENT): InstructionInfo(0x1038, 2),
    ("pshuw", AddressingMode.INHERENT): InstructionInfo(0x103A, 2),
    ("puls", AddressingMode.REGISTER): InstructionInfo(0x35, 2),
    ("pulu", AddressingMode.REGISTER): InstructionInfo(0x37, 2),
    ("pulsw", AddressingMode.INHERENT): InstructionInfo(0x1039, 2),
    ("puluw", AddressingMode.INHERENT): InstructionInfo(0x103B, 2),
    ("rola", AddressingMode.INHERENT): InstructionInfo(0x49, 1),
    ("rolb", AddressingMode.INHERENT): InstructionInfo(0x59, 1),
    ("rold", AddressingMode.INHERENT): InstructionInfo(0x1049, 2),
    ("rolw", AddressingMode.INHERENT): InstructionInfo(0x1059, 2),
    ("rol", AddressingMode.DIRECT): InstructionInfo(0x09, 2),
    ("rol", AddressingMode.INDEXED): InstructionInfo(0x69, 2),
    ("rol", AddressingMode.EXTENDED): InstructionInfo(0x79, 3),
    ("rora", AddressingMode.INHERENT): InstructionInfo(0x46, 1),
    ("rorb", AddressingMode.INHERENT): InstructionInfo(0x56, 1),
    ("rord", AddressingMode.INHERENT): InstructionInfo(0x1046, 2),
    ("rorw", AddressingMode.INHERENT): InstructionInfo(0x1056, 2),
    ("ror", AddressingMode.DIRECT): InstructionInfo(0x06, 2),
    ("ror", AddressingMode.INDEXED): InstructionInfo(0x66, 2),
    ("ror", AddressingMode.EXTENDED): InstructionInfo(0x76, 3),
    ("rti", AddressingMode.INHERENT): InstructionInfo(0x3B, 1),
    ("rts", AddressingMode.INHERENT): InstructionInfo(0x39, 1),
    ("sbca", AddressingMode.IMMEDIATE): InstructionInfo(0x82, 2),
    ("sbca", AddressingMode.DIRECT): InstructionInfo(0x92, 2),
    ("sbca", AddressingMode.INDEXED): InstructionInfo(0xA2, 2),
    ("sbca", AddressingMode.EXTENDED): InstructionInfo(0xB2, 3),
    ("sbcb", AddressingMode.IMMEDIATE): InstructionInfo(0xC2, 2),
    ("sbcb", AddressingMode.DIRECT): InstructionInfo(0xD2, 2),
    ("sbcb", AddressingMode.INDEXED): InstructionInfo(0xE2, 2),
    ("sbcb", AddressingMode.EXTENDED): InstructionInfo(0xF2, 3),
    ("sbcd", AddressingMode.IMMEDIATE): InstructionInfo(0x1082, 4),
    ("sbcd", AddressingMode.DIRECT): InstructionInfo(0x1092, 3),
    ("sbcd", AddressingMode.INDEXED): InstructionInfo(0x10A2, 3),
    ("sbcd", AddressingMode.EXTENDED): InstructionInfo(0x10B2, 4),
    ("sex", AddressingMode.INHERENT): InstructionInfo(0x1D, 1),
    ("sexw", AddressingMode.INHERENT): InstructionInfo(0x14, 1),
    ("sta", AddressingMode.DIRECT): InstructionInfo(0x97, 2),
    ("sta", AddressingMode.INDEXED): InstructionInfo(0xA7, 2),
    ("sta", AddressingMode.EXTENDED): InstructionInfo(0xB7, 3),
    ("stb", AddressingMode.DIRECT): InstructionInfo(0xD7, 2),
    ("stb", AddressingMode.INDEXED): InstructionInfo(0xE7, 2),
    ("stb", AddressingMode.EXTENDED): InstructionInfo(0xF7, 3),
    ("std", AddressingMode.DIRECT): InstructionInfo(0xDD, 2),
    ("std", AddressingMode.INDEXED): InstructionInfo(0xED, 2),
    ("std", AddressingMode.EXTENDED): InstructionInfo(0xFD, 3),
    ("ste", AddressingMode.DIRECT): InstructionInfo(0x1197, 3),
    ("ste", AddressingMode.INDEXED): InstructionInfo(0x11A7, 3),
    ("ste", AddressingMode.EXTENDED): InstructionInfo(0x11B7, 4),
    ("stf", AddressingMode.DIRECT): InstructionInfo(0x11D7, 3),
    ("stf", AddressingMode.INDEXED): InstructionInfo(0x11E7, 3),
    ("stf", AddressingMode.EXTENDED): InstructionInfo(0x11F7, 4),
    ("stq", AddressingMode.DIRECT): InstructionInfo(0x10DD, 3),
    ("stq", AddressingMode.INDEXED): InstructionInfo(0x10ED, 3),
    ("stq", AddressingMode.EXTENDED): InstructionInfo(0x10FD, 4),
    ("sts", AddressingMode.DIRECT): InstructionInfo(0x10DF, 3),
    ("sts", AddressingMode.INDEXED): InstructionInfo(0x10EF, 3),
    ("sts", AddressingMode.EXTENDED): InstructionInfo(0x10FF, 4),
    ("stu", AddressingMode.DIRECT): InstructionInfo(0xDF, 2),
    ("stu", AddressingMode.INDEXED): InstructionInfo(0xEF, 2),
    ("stu", AddressingMode.EXTENDED): InstructionInfo(0xFF, 3),
    ("stw", AddressingMode.DIRECT): InstructionInfo(0x1097, 3),
    ("stw", AddressingMode.INDEXED): InstructionInfo(0x10A7, 3),
    ("stw", AddressingMode.EXTENDED): InstructionInfo(0x10B7, 4),
    ("stx", AddressingMode.DIRECT): InstructionInfo(0x9F, 2),
    ("stx", AddressingMode.INDEXED): InstructionInfo(0xAF, 2),
    ("stx", AddressingMode.EXTENDED): InstructionInfo(0xBF, 3),
    ("sty", AddressingMode.DIRECT): InstructionInfo(0x109F, 3),
    ("sty", AddressingMode.INDEXED): InstructionInfo(0x10AF, 3),
    ("sty", AddressingMode.EXTENDED): InstructionInfo(0x10BF, 4),
    ("suba", AddressingMode.IMMEDIATE): InstructionInfo(0x80, 2),
    ("suba", AddressingMode.DIRECT): InstructionInfo(0x90, 2),
    ("suba", AddressingMode.INDEXED): InstructionInfo(0xA0, 2),
    ("suba", AddressingMode.EXTENDED): InstructionInfo(0xB0, 3),
    ("subb", AddressingMode.IMMEDIATE): InstructionInfo(0xC0, 2),
    ("subb", AddressingMode.DIRECT): InstructionInfo(0xD0, 2),
    ("subb", AddressingMode.INDEXED): InstructionInfo(0xE0, 2),
    ("subb", AddressingMode.EXTENDED): InstructionInfo(0xF0, 3),
    ("subd", AddressingMode.IMMEDIATE): InstructionInfo(0x83, 3),
    ("subd", AddressingMode.DIRECT): InstructionInfo(0x93, 2),
    ("subd", AddressingMode.INDEXED): InstructionInfo(0xA3, 2),
    ("subd", AddressingMode.EXTENDED): InstructionInfo(0xB3, 3),
    ("sube", AddressingMode.IMMEDIATE): InstructionInfo(0x1180, 3),
    ("sube", AddressingMode.DIRECT): InstructionInfo(0x1190, 3),
    ("sube", AddressingMode.INDEXED): InstructionInfo(0x11A0, 3),
    ("sube", AddressingMode.EXTENDED): InstructionInfo(0x11B0, 4),
    ("subf", AddressingMode.IMMEDIATE): InstructionInfo(0x11C0, 3),
    ("subf", AddressingMode.DIRECT): InstructionInfo(0x11D0, 3),
    ("subf", AddressingMode.INDEXED): InstructionInfo(0x11E0, 3),
    ("subf", AddressingMode.EXTENDED): InstructionInfo(0x11F0, 4),
    ("subw", AddressingMode.IMMEDIATE): InstructionInfo(0x1080, 4),
    ("subw", AddressingMode.DIRECT): InstructionInfo(0x1090, 3),
    ("subw", AddressingMode.INDEXED): InstructionInfo(0x10A0, 3),
    ("subw", AddressingMode.EXTENDED): InstructionInfo(0x10B0, 4),
    ("swi", AddressingMode.INHERENT): InstructionInfo(0x3F, 1),
    ("swi2", AddressingMode.INHERENT): InstructionInfo(0x103F, 2),
    ("swi3", AddressingMode.INHERENT): InstructionInfo(0x113F, 2),
    ("sync", AddressingMode.INHERENT): InstructionInfo(0x13, 1),
    ("tfr", AddressingMode.REGISTER): InstructionInfo(0x1F, 2),
    ("tim", AddressingMode.DIRECT): InstructionInfo(0x0B, 3),
    ("tim", AddressingMode.INDEXED): InstructionInfo(0x6B, 3),
    ("tim", AddressingMode.EXTENDED): InstructionInfo(0x7B, 4),
    ("tsta", AddressingMode.INHERENT): InstructionInfo(0x4D, 1),
    ("tstb", AddressingMode.INHERENT): InstructionInfo(0x5D, 1),
    ("tstd", AddressingMode.INHERENT): InstructionInfo(0x104D, 2),
    ("tste", AddressingMode.INHERENT): InstructionInfo(0x114D, 2),
    ("tstf", AddressingMode.INHERENT): InstructionInfo(0x115D, 2),
    ("tstw", AddressingMode.INHERENT): InstructionInfo(0x105D, 2),
    ("tst", AddressingMode.DIRECT): InstructionInfo(0x0D, 2),
    ("tst", AddressingMode.INDEXED): InstructionInfo(0x6D, 2),
    ("tst", AddressingMode.EXTENDED): InstructionInfo(0x7D, 3),

    # Inter-register arithmetic (6309)
    ("addr", AddressingMode.REGISTER): InstructionInfo(0x1030, 3),
    ("adcr", AddressingMode.REGISTER): InstructionInfo(0x1031, 3),
    ("subr", AddressingMode.REGISTER): InstructionInfo(0x1032, 3),
    ("sbcr", AddressingMode.REGISTER): InstructionInfo(0x1033, 3),
    ("andr", AddressingMode.REGISTER): InstructionInfo(0x1034, 3),
    ("orr", AddressingMode.REGISTER): InstructionInfo(0x1035, 3),
    ("eorr", AddressingMode.REGISTER): InstructionInfo(0x1036, 3),
    ("cmpr", AddressingMode.REGISTER): InstructionInfo(0x1037, 3),

    # Block transfer (6309); the operand selects $1138-$113B
    ("tfm", AddressingMode.REGISTER): InstructionInfo(0x1138, 3),

    # Direct-page bit manipulation (6309): opcode, post-byte, address
    ("band", AddressingMode.DIRECT): InstructionInfo(0x1130, 4),
    ("biand", AddressingMode.DIRECT): InstructionInfo(0x1131, 4),
    ("bor", AddressingMode.DIRECT): InstructionInfo(0x1132, 4),
    ("bior", AddressingMode.DIRECT): InstructionInfo(0x1133, 4),
    ("beor", AddressingMode.DIRECT): InstructionInfo(0x1134, 4),
    ("bieor", AddressingMode.DIRECT): InstructionInfo(0x1135, 4),
    ("ldbt", AddressingMode.DIRECT): InstructionInfo(0x1136, 4),
    ("stbt", AddressingMode.DIRECT): InstructionInfo(0x1137, 4),
}


# =============================================================================
# Branches
# =============================================================================

_SHORT_BRANCHES = {
    "bra": 0x20, "brn": 0x21, "bhi": 0x22, "bls": 0x23,
    "bcc": 0x24, "bhs": 0x24, "bcs": 0x25, "blo": 0x25,
    "bne": 0x26, "beq": 0x27, "bvc": 0x28, "bvs": 0x29,
    "bpl": 0x2A, "bmi": 0x2B, "bge": 0x2C, "blt": 0x2D,
    "bgt": 0x2E, "ble": 0x2F, "bsr": 0x8D,
}

for _name, _opcode in _SHORT_BRANCHES.items():
    OPCODE_TABLE[(_name, AddressingMode.RELATIVE)] = InstructionInfo(_opcode, 2)
    if _name == "bra":
        _long = InstructionInfo(0x16, 3)
    elif _name == "bsr":
        _long = InstructionInfo(0x17, 3)
    else:
        _long = InstructionInfo(0x1000 | _opcode, 4)
    OPCODE_TABLE[("l" + _name, AddressingMode.RELATIVE)] = _long

SHORT_BRANCHES = frozenset(_SHORT_BRANCHES)
LONG_BRANCHES = frozenset("l" + name for name in _SHORT_BRANCHES)
BRANCHES = SHORT_BRANCHES | LONG_BRANCHES


# =============================================================================
# Instruction Groups
# =============================================================================

ALIASES: dict[str, str] = {
    "ldaa": "lda",
    "ldab": "ldb",
    "staa": "sta",
    "stab": "stb",
    "oraa": "ora",
    "orab": "orb",
    "lsl": "asl",
    "lsla": "asla",
    "lslb": "aslb",
    "lsld": "asld",
}

# Operands are register lists or register pairs, not expressions
REGISTER_OPERAND_MNEMONICS = frozenset({
    "tfr", "exg", "pshs", "puls", "pshu", "pulu",
    "addr", "adcr", "subr", "sbcr", "andr", "orr", "eorr", "cmpr", "tfm",
})

STACK_MNEMONICS = frozenset({"pshs", "puls", "pshu", "pulu"})

# #mask,address
MEMORY_IMMEDIATE_MNEMONICS = frozenset({"aim", "eim", "oim", "tim"})

# reg,source_bit,dest_bit,address
BIT_MNEMONICS = frozenset({
    "band", "biand", "bor", "bior", "beor", "bieor", "ldbt", "stbt",
})

HD6309_ONLY = frozenset({
    "adcd",
    "adde",
    "addf",
    "addw",
    "aim",
    "andd",
    "asld",
    "asrd",
    "bitd",
    "bitmd",
    "clrd",
    "clre",
    "clrf",
    "clrw",
    "cmpe",
    "cmpf",
    "cmpw",
    "comd",
    "come",
    "comf",
    "comw",
    "decd",
    "dece",
    "decf",
    "decw",
    "divd",
    "divq",
    "eim",
    "eord",
    "incd",
    "ince",
    "incf",
    "incw",
    "lde",
    "ldf",
    "ldq",
    "ldw",
    "ldmd",
    "lsrd",
    "lsrw",
    "muld",
    "negd",
    "oim",
    "ord",
    "pshsw",
    "pshuw",
    "pulsw",
    "puluw",
    "rold",
    "rolw",
    "rord",
    "rorw",
    "sbcd",
    "sexw",
    "ste",
    "stf",
    "stq",
    "stw",
    "sube",
    "subf",
    "subw",
    "tim",
    "tstd",
    "tste",
    "tstf",
    "tstw",
    "addr", "adcr", "subr", "sbcr", "andr", "orr", "eorr", "cmpr", "tfm",
    "band", "biand", "bor", "bior", "beor", "bieor", "ldbt", "stbt",
    "lsld",
})


def build_table(extended: bool) -> dict[tuple[str, AddressingMode], InstructionInfo]:
    """Return the opcode table for the 6809, or the 6309 when ``extended``."""
    if extended:
        return dict(OPCODE_TABLE)
    return {
        key: info for key, info in OPCODE_TABLE.items() if key[0] not in HD6309_ONLY
    }
